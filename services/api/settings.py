# services/api/settings.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field
from typing import List, Optional
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    # Blob storage (Google Cloud Storage)
    # Required: the single bucket all documents live in. Reads from any
    # other bucket are rejected.
    gcp_bucket_name: str = ""
    # If TRUE, uploaded files are made public and addressed by https URL,
    # otherwise by gs:// URI.
    gcs_make_public: bool = False
    gcs_public_host: str = "storage.googleapis.com"

    # Shared secret for the upload endpoint (x-api-key header)
    api_key: str = ""

    # Record store (JSON file, rewritten on every mutation)
    pdf_store_path: str = str(BASE_DIR / "data" / "pdfStore.json")

    # Bundled contract template and font assets
    template_path: str = str(BASE_DIR / "templates" / "DVV-All-Time-Best-Media.pdf")
    fonts_dir: str = str(BASE_DIR / "public" / "fonts")

    # Optional JSON file overriding the built-in layout
    layout_path: Optional[str] = None

    # Downstream notification
    webhook_url: str = "https://hook.eu2.make.com/shqssx7au2d7m7fu4hz86qiojoh65k40"
    webhook_timeout_s: float = Field(default=10.0, gt=0)

    # Default signing date is "today" in this zone, formatted DD.MM.YYYY
    timezone: str = "Europe/Berlin"

    # CORS settings
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    log_level: str = "INFO"

    model_config = ConfigDict(
        # Always load .env from the same folder as this settings.py
        env_file=str(BASE_DIR / ".env"),
        extra="ignore",
    )

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


_settings_instance = None

def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
