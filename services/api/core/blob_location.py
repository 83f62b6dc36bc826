# services/api/core/blob_location.py
"""
Addressing for stored documents.

Two forms are supported:
    gs://{bucket}/{path}                          private objects
    https://storage.googleapis.com/{bucket}/{path}  objects made public

Any caller that turns a location back into a read MUST check the bucket
against the configured one (`ensure_trusted`). Locations come from request
data and record files, so they are untrusted input.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from core.errors import InvalidLocationFormat, UntrustedBucket

GS_SCHEME = "gs://"
DEFAULT_PUBLIC_HOST = "storage.googleapis.com"

_GS_RE = re.compile(r"^gs://([^/]+)/(.+)$")


@dataclass(frozen=True)
class BlobAddress:
    bucket: str
    path: str


def _public_re(host: str) -> "re.Pattern[str]":
    return re.compile(r"^https://" + re.escape(host) + r"/([^/]+)/(.+)$")


def format_location(bucket: str, path: str, make_public: bool, *, host: str = DEFAULT_PUBLIC_HOST) -> str:
    """Build the location string for an object in `bucket`."""
    if not bucket or "/" in bucket:
        raise InvalidLocationFormat(f"Invalid bucket name: {bucket!r}")
    if not path:
        raise InvalidLocationFormat("Object path must not be empty")

    if make_public:
        return f"https://{host}/{bucket}/{path}"
    return f"{GS_SCHEME}{bucket}/{path}"


def parse_location(location: str, *, host: str = DEFAULT_PUBLIC_HOST) -> BlobAddress:
    """
    Split a location into bucket and object path.

    Raises:
        InvalidLocationFormat: for anything but the two supported forms.
    """
    if not location:
        raise InvalidLocationFormat("Empty blob location")

    if location.startswith(GS_SCHEME):
        match = _GS_RE.match(location)
        if not match:
            raise InvalidLocationFormat(f"Invalid GCS URI format: {location}")
        return BlobAddress(bucket=match.group(1), path=match.group(2))

    if location.startswith(f"https://{host}/"):
        match = _public_re(host).match(location)
        if not match:
            raise InvalidLocationFormat(f"Invalid GCS public URL format: {location}")
        return BlobAddress(bucket=match.group(1), path=match.group(2))

    raise InvalidLocationFormat(f"Unsupported blob location format: {location}")


def ensure_trusted(address: BlobAddress, configured_bucket: str) -> BlobAddress:
    """
    Raises:
        UntrustedBucket: if `address` points outside the configured bucket.
    """
    if address.bucket != configured_bucket:
        raise UntrustedBucket(address.bucket, configured_bucket)
    return address
