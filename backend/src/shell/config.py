"""Configuration - environment-driven settings for the shell layer."""

import os
from dataclasses import dataclass, field
from pathlib import Path


DEFAULT_CORS_ORIGINS = "http://localhost:8081,http://localhost:19006"


@dataclass
class FirestoreConfig:
    """Configuration for the Firestore storage backend.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        collection: Collection holding one document per storage key
    """

    project_id: str | None = None
    database: str | None = None
    collection: str = "calorietrack"


@dataclass
class AppConfig:
    """Top-level configuration.

    Attributes:
        storage: Backend name - "memory", "file" or "firestore"
        data_dir: Directory for the file backend
        firestore: Firestore backend settings
        calorie_ninjas_api_key: Enables the CalorieNinjas lookup when set
        host: HTTP bind host
        port: HTTP bind port
        cors_origins: Origins allowed to call the HTTP app
    """

    storage: str = "file"
    data_dir: Path = field(default_factory=lambda: Path.home() / ".calorietrack")
    firestore: FirestoreConfig = field(default_factory=FirestoreConfig)
    calorie_ninjas_api_key: str | None = None
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = field(default_factory=lambda: DEFAULT_CORS_ORIGINS.split(","))

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build configuration from environment variables."""
        data_dir = os.environ.get("CALORIETRACK_DATA_DIR")
        origins = os.environ.get("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)

        return cls(
            storage=os.environ.get("CALORIETRACK_STORAGE", "file").lower(),
            data_dir=Path(data_dir).expanduser() if data_dir else Path.home() / ".calorietrack",
            firestore=FirestoreConfig(
                project_id=os.environ.get("FIRESTORE_PROJECT") or None,
                database=os.environ.get("FIRESTORE_DATABASE") or None,
                collection=os.environ.get("CALORIETRACK_COLLECTION", "calorietrack"),
            ),
            calorie_ninjas_api_key=os.environ.get("CALORIENINJAS_API_KEY") or None,
            host=os.environ.get("HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", 8080)),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
