"""Configuration loading for the Seekr review notifier."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Application settings
    app_name: str = "Seekr Review Notifier"
    app_version: str = "1.0.0"
    debug: bool = False

    # Backend selection
    store_backend: str = Field(default="elasticsearch", alias="SEEKR_STORE_BACKEND")
    push_backend: str = Field(default="firebase", alias="SEEKR_PUSH_BACKEND")

    # Elasticsearch settings
    elasticsearch_url: Optional[str] = Field(default=None, alias="ELASTICSEARCH_URL")
    es_host: str = Field(default="localhost", alias="ELASTICSEARCH_HOST")
    es_port: int = Field(default=9200, alias="ELASTICSEARCH_PORT")
    es_scheme: str = Field(default="http", alias="ELASTICSEARCH_SCHEME")
    es_username: Optional[str] = Field(default=None, alias="ELASTICSEARCH_USERNAME")
    es_password: Optional[str] = Field(default=None, alias="ELASTICSEARCH_PASSWORD")
    es_api_key: Optional[str] = Field(default=None, alias="ELASTICSEARCH_API_KEY")
    es_cloud_id: Optional[str] = Field(default=None, alias="ELASTICSEARCH_CLOUD_ID")
    es_verify_certs: bool = Field(default=True, alias="ELASTICSEARCH_VERIFY_CERTS")

    # Firebase settings
    firebase_project_id: Optional[str] = Field(default=None, alias="FIREBASE_PROJECT_ID")
    firebase_credentials_path: Optional[str] = Field(default=None, alias="GOOGLE_APPLICATION_CREDENTIALS")
    firestore_emulator_host: Optional[str] = Field(default=None, alias="FIRESTORE_EMULATOR_HOST")
    messaging_dry_run: bool = Field(default=False, alias="SEEKR_MESSAGING_DRY_RUN")

    # Collection names. Elasticsearch index names must be lowercase, so the
    # reviews collection is stored as hunts_reviews there.
    hunts_collection: str = "hunts"
    profiles_collection: str = "profiles"
    reviews_collection: str = "hunts_reviews"
    debug_collection: str = "debug_notifications"

    # Ingest pipeline that stamps server-side timestamps on appended documents
    timestamp_pipeline: str = "seekr-server-timestamp"

    # Global cap on simultaneously running trigger invocations
    max_instances: int = Field(default=10, alias="SEEKR_MAX_INSTANCES")

    # Review watcher settings
    watch_interval: float = 2.0  # seconds between polls
    watch_batch_size: int = 50  # reviews fetched per poll

    @field_validator("max_instances")
    @classmethod
    def _check_max_instances(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_instances must be at least 1")
        return value

    @field_validator("store_backend")
    @classmethod
    def _check_store_backend(cls, value: str) -> str:
        if value not in ("elasticsearch", "firestore"):
            raise ValueError(f"Unsupported store backend: {value}")
        return value

    @field_validator("push_backend")
    @classmethod
    def _check_push_backend(cls, value: str) -> str:
        if value not in ("firebase", "log"):
            raise ValueError(f"Unsupported push backend: {value}")
        return value

    @property
    def es_url(self) -> str:
        """Get the full Elasticsearch URL."""
        return f"{self.es_scheme}://{self.es_host}:{self.es_port}"

    @classmethod
    def load_from_yaml(cls, yaml_path: str = "config/config.yaml") -> "Settings":
        """Load settings from YAML config file, with env overrides."""
        config_data = {}

        yaml_file = Path(yaml_path)
        if yaml_file.exists():
            with open(yaml_file, "r") as f:
                yaml_config = yaml.safe_load(f) or {}

            # Flatten nested YAML structure
            if "elasticsearch" in yaml_config:
                es_config = yaml_config["elasticsearch"]
                config_data["es_host"] = es_config.get("host")
                config_data["es_port"] = es_config.get("port")
                config_data["es_scheme"] = es_config.get("scheme")
                config_data["es_verify_certs"] = es_config.get("verify_certs")

            if "collections" in yaml_config:
                collections = yaml_config["collections"]
                config_data["hunts_collection"] = collections.get("hunts")
                config_data["profiles_collection"] = collections.get("profiles")
                config_data["reviews_collection"] = collections.get("reviews")
                config_data["debug_collection"] = collections.get("debug_notifications")

            if "app" in yaml_config:
                app_config = yaml_config["app"]
                config_data["app_name"] = app_config.get("name")
                config_data["debug"] = app_config.get("debug")
                config_data["store_backend"] = app_config.get("store_backend")
                config_data["push_backend"] = app_config.get("push_backend")
                config_data["max_instances"] = app_config.get("max_instances")

            if "firebase" in yaml_config:
                firebase = yaml_config["firebase"]
                config_data["firebase_project_id"] = firebase.get("project_id")
                config_data["messaging_dry_run"] = firebase.get("dry_run")

            if "watcher" in yaml_config:
                watcher = yaml_config["watcher"]
                config_data["watch_interval"] = watcher.get("interval")
                config_data["watch_batch_size"] = watcher.get("batch_size")

        # Filter out None values
        config_data = {k: v for k, v in config_data.items() if v is not None}

        return cls(**config_data)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.load_from_yaml()


def configure_logging(settings: Settings) -> None:
    """Configure root logging once at process start."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S"
    )
