from __future__ import annotations

from fastapi import Request

from ..config import BuildInfo, Settings
from ..core.metrics import HL7Metrics


def get_build_info(request: Request) -> BuildInfo:
    """Build metadata injected into the application at startup."""
    return request.app.state.build_info


def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_metrics(request: Request) -> HL7Metrics:
    return request.app.state.metrics
