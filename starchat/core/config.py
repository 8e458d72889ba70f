import os
from pathlib import Path
from typing import get_type_hints

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    SECRET: str
    DATABASE_URL: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    LOG_LEVEL: str = "INFO"

    # Blob storage for chat attachments and post media
    STORAGE_ROOT: str = "storage/public"
    STORAGE_URL: str = "/storage"
    MAX_ATTACHMENT_BYTES: int = 10 * 1024 * 1024

    CONVERSATIONS_PER_PAGE: int = 15
    MESSAGES_PER_PAGE: int = 20
    MAX_PER_PAGE: int = 100

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @classmethod
    def get_required_fields(cls) -> list[str]:
        """Get all required fields (those without default values)."""
        hints = get_type_hints(cls)
        return [
            field
            for field, _ in hints.items()
            if field in cls.model_fields and cls.model_fields[field].is_required()
        ]

    def __init__(self, **kwargs):
        try:
            super().__init__(**kwargs)
        except ValidationError as e:
            env_file = Path(".env")
            missing_fields = [
                field for field in self.get_required_fields() if not os.getenv(field)
            ]

            if not missing_fields:
                raise

            fields_str = "\n".join(f"- {field}" for field in missing_fields)
            example_env = "\n".join(
                f"{field}=your_{field.lower()}_here" for field in missing_fields
            )

            if not env_file.exists():
                error_msg = (
                    f"\n\nError: Missing required environment variables!"
                    f"\nMissing variables:\n{fields_str}"
                    f"\n\nFor local development, create a .env file with:"
                    f"\n{example_env}"
                    f"\n\nIn production, set these as environment variables."
                )
            else:
                error_msg = (
                    f"\n\nError: Missing required environment variables!"
                    f"\nMissing variables:\n{fields_str}"
                    f"\n\nPlease add these to your .env file or set as environment variables."
                )

            raise ValueError(error_msg) from e


settings = Settings()
