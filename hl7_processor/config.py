from __future__ import annotations

from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict

from . import __version__


@dataclass(frozen=True)
class BuildInfo:
    """Build metadata, fixed once at process start."""

    version: str
    build_date: str


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")

    SERVICE_NAME: str = "hl7-processor"
    LOG_LEVEL: str = "INFO"

    # HTTP server
    HL7_HOST: str = "0.0.0.0"
    HL7_PORT: int = 8080
    MAX_MESSAGE_BYTES: int = 1024 * 1024  # 1 MiB

    # Build metadata, stamped by the release pipeline
    HL7_VERSION: str = __version__
    HL7_BUILD_DATE: str = "unknown"

    def build_info(self) -> BuildInfo:
        return BuildInfo(version=self.HL7_VERSION, build_date=self.HL7_BUILD_DATE)


def get_settings() -> Settings:
    return Settings()
