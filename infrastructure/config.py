from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # make it absolute so reload/CWD doesn't break it
        env_file=Path(__file__).resolve().parents[1] / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Artifact Generator", validation_alias="APP_NAME")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        validation_alias="APP_ENV",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_dir: Path = Field(
        default=Path(__file__).resolve().parents[1] / "logs",
        validation_alias="LOG_DIR",
    )

    # API
    api_host: str = Field(default="127.0.0.1", validation_alias="API_HOST")
    api_port: int = Field(default=8000, validation_alias="API_PORT")

    # Multipart uploads
    multipart_max_field_size: int = Field(
        default=1024 * 1024,
        validation_alias="MULTIPART_MAX_FIELD_SIZE",
        description="Largest accepted value of a plain form field, in bytes.",
    )
    multipart_read_chunk_size: int = Field(
        default=64 * 1024,
        validation_alias="MULTIPART_READ_CHUNK_SIZE",
    )
    max_generate_data_size: int = Field(
        default=512 * 1024 * 1024,
        validation_alias="MAX_GENERATE_DATA_SIZE",
        description="Largest artifact file accepted for generation, in bytes.",
    )

    # Blob Storage
    blob_base_url: str = Field(
        default="file://" + str(Path(__file__).resolve().parents[1] / "blobs"),
        validation_alias="BLOB_BASE_URL",
    )
    blob_storage_options: dict = {}

    # Temporal
    temporal_address: str = Field(
        default="localhost:7233",
        validation_alias="TEMPORAL_ADDRESS",
    )
    temporal_namespace: str = Field(default="default", validation_alias="TEMPORAL_NAMESPACE")
    generate_task_queue: str = Field(
        default="artifact_generation",
        validation_alias="GENERATE_TASK_QUEUE",
    )
    generate_workflow_name: str = Field(
        default="GenerateArtifactWorkflow",
        validation_alias="GENERATE_WORKFLOW_NAME",
    )


# Global settings instance
settings = Settings()
