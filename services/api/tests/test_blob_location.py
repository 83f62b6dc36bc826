"""
Tests for blob location formatting and parsing.

Run with: pytest tests/test_blob_location.py -v
"""
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.blob_location import BlobAddress, ensure_trusted, format_location, parse_location
from core.errors import InvalidLocationFormat, UntrustedBucket


class TestFormatLocation:
    def test_private(self):
        assert format_location("b1", "signed/signed_1.pdf", False) == "gs://b1/signed/signed_1.pdf"

    def test_public(self):
        assert (
            format_location("b1", "uploads/x.pdf", True)
            == "https://storage.googleapis.com/b1/uploads/x.pdf"
        )

    def test_empty_path(self):
        with pytest.raises(InvalidLocationFormat):
            format_location("b1", "", False)

    def test_bucket_with_slash(self):
        with pytest.raises(InvalidLocationFormat):
            format_location("b1/evil", "x.pdf", False)


class TestParseLocation:
    def test_gs_uri(self):
        assert parse_location("gs://b1/contracts/a.pdf") == BlobAddress("b1", "contracts/a.pdf")

    def test_public_url(self):
        address = parse_location("https://storage.googleapis.com/b1/uploads/u.pdf")
        assert address == BlobAddress("b1", "uploads/u.pdf")

    @pytest.mark.parametrize("make_public", [False, True])
    def test_round_trip(self, make_public):
        location = format_location("bucket-a", "signed/signed_42.pdf", make_public)
        assert parse_location(location) == BlobAddress("bucket-a", "signed/signed_42.pdf")

    @pytest.mark.parametrize(
        "location",
        [
            "",
            "gs://",
            "gs://bucket-only",
            "gs://bucket/",
            "https://example.com/b1/x.pdf",
            "http://storage.googleapis.com/b1/x.pdf",
            "/local/path.pdf",
        ],
    )
    def test_rejected(self, location):
        with pytest.raises(InvalidLocationFormat):
            parse_location(location)


class TestEnsureTrusted:
    def test_same_bucket(self):
        address = BlobAddress("b1", "x.pdf")
        assert ensure_trusted(address, "b1") is address

    def test_other_bucket(self):
        with pytest.raises(UntrustedBucket) as exc:
            ensure_trusted(BlobAddress("evil", "x.pdf"), "b1")
        assert exc.value.bucket == "evil"
        assert exc.value.expected == "b1"
