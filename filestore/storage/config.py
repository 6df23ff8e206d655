"""Storage configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from filestore.config import Settings


class StorageConfig(BaseModel):
    """Configuration for blob storage.

    Attributes:
        root: Base directory holding stored file bytes.
    """

    root: str = Field(default="./data/files", description="Blob storage root directory")

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageConfig":
        """Build the storage config from application settings."""
        return cls(root=settings.FILES_PATH)
