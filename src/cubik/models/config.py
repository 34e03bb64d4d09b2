"""Configuration models."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="CUBIK_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    server_host: str = Field(default="0.0.0.0", description="HTTP API host")
    server_port: int = Field(default=9080, description="HTTP API port")
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding saved animations",
    )
    discovery_timeout: float = Field(
        default=3.0,
        gt=0,
        description="Seconds to wait for further discovery replies",
    )
    command_timeout: float = Field(
        default=3.0,
        gt=0,
        description="Connect and I/O timeout for device commands",
    )
    target_model: str = Field(
        default="CubeLite",
        description="Only devices reporting this model are returned by discovery",
    )
    matrix_width: int = Field(default=20, gt=0, description="LED matrix width")
    matrix_height: int = Field(default=5, gt=0, description="LED matrix height")
    frame_interval: float = Field(
        default=1.0,
        gt=0,
        description="Seconds between animation frames",
    )
    log_level: str = Field(default="INFO", description="Logging level")
