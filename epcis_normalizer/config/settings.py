"""Settings configuration for the EPCIS normalizer"""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..detector import EPCIS_JSONLD_CONTEXTS


class Settings(BaseSettings):
    """Application settings, read from `EPCIS_*` environment variables or `.env`"""

    # Parser defaults
    VALIDATE: bool = True
    THROW_ON_ERROR: bool = True

    # Format detection
    JSONLD_CONTEXT_URIS: List[str] = list(EPCIS_JSONLD_CONTEXTS)

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="EPCIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Create settings instance
settings = Settings()
