"""
Dashboard API Configuration.

Controls the REST backend the workflow editor persists to:
base URL, access token, and request timeout.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from service.config.base import BaseConfig, ConfigField, FieldType, register_config
from service.config.sub_config.general.env_utils import env_sync, read_env_defaults


@register_config
@dataclass
class DashboardAPIConfig(BaseConfig):
    """Dashboard REST API settings."""

    api_base_url: str = "http://localhost:3001/api/v1"
    access_token: str = ""
    request_timeout: float = 15.0

    _ENV_MAP = {
        "api_base_url": "DASHBOARD_API_URL",
        "access_token": "DASHBOARD_API_TOKEN",
        "request_timeout": "DASHBOARD_API_TIMEOUT",
    }

    @classmethod
    def get_default_instance(cls) -> "DashboardAPIConfig":
        defaults = read_env_defaults(cls._ENV_MAP, cls.__dataclass_fields__)
        return cls(**defaults)

    @classmethod
    def get_config_name(cls) -> str:
        return "api"

    @classmethod
    def get_display_name(cls) -> str:
        return "Dashboard API"

    @classmethod
    def get_description(cls) -> str:
        return "Backend URL, access token and timeout used to load and save workflows."

    @classmethod
    def get_icon(cls) -> str:
        return "api"

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return [
            ConfigField(
                name="api_base_url",
                field_type=FieldType.STRING,
                label="API Base URL",
                description="Root URL of the dashboard REST API",
                default="http://localhost:3001/api/v1",
                required=True,
                placeholder="https://api.example.com/api/v1",
                group="api",
                apply_change=env_sync("DASHBOARD_API_URL"),
            ),
            ConfigField(
                name="access_token",
                field_type=FieldType.PASSWORD,
                label="Access Token",
                description="Bearer token sent with every request",
                placeholder="eyJhbGciOi…",
                group="api",
                secure=True,
                apply_change=env_sync("DASHBOARD_API_TOKEN"),
            ),
            ConfigField(
                name="request_timeout",
                field_type=FieldType.NUMBER,
                label="Request Timeout (s)",
                description="Timeout for a single API call",
                default=15.0,
                min_value=1,
                max_value=300,
                group="api",
                apply_change=env_sync("DASHBOARD_API_TIMEOUT"),
            ),
        ]
