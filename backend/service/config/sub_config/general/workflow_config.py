"""
Workflow Editor Configuration.

Local storage location for the file-backed workflow store,
system template seeding, and the per-session event log size.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from service.config.base import BaseConfig, ConfigField, FieldType, register_config
from service.config.sub_config.general.env_utils import env_sync, read_env_defaults


@register_config
@dataclass
class WorkflowEditorConfig(BaseConfig):
    """Workflow editor and local store settings."""

    storage_dir: str = "workflows"
    seed_system_templates: bool = True
    session_log_limit: int = 500

    _ENV_MAP = {
        "storage_dir": "WORKFLOW_STORAGE_DIR",
        "seed_system_templates": "WORKFLOW_SEED_TEMPLATES",
        "session_log_limit": "WORKFLOW_SESSION_LOG_LIMIT",
    }

    @classmethod
    def get_default_instance(cls) -> "WorkflowEditorConfig":
        defaults = read_env_defaults(cls._ENV_MAP, cls.__dataclass_fields__)
        return cls(**defaults)

    @classmethod
    def get_config_name(cls) -> str:
        return "workflow"

    @classmethod
    def get_display_name(cls) -> str:
        return "Workflows"

    @classmethod
    def get_description(cls) -> str:
        return "Storage and editor behaviour for workflow automations."

    @classmethod
    def get_icon(cls) -> str:
        return "workflow"

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return [
            ConfigField(
                name="storage_dir",
                field_type=FieldType.PATH,
                label="Storage Directory",
                description="Directory for the JSON workflow store",
                default="workflows",
                required=True,
                group="storage",
                apply_change=env_sync("WORKFLOW_STORAGE_DIR"),
            ),
            ConfigField(
                name="seed_system_templates",
                field_type=FieldType.BOOLEAN,
                label="Seed System Templates",
                description="Install the built-in system workflows for new organizations",
                default=True,
                group="storage",
                apply_change=env_sync("WORKFLOW_SEED_TEMPLATES"),
            ),
            ConfigField(
                name="session_log_limit",
                field_type=FieldType.NUMBER,
                label="Session Log Limit",
                description="Maximum events kept per editing session",
                default=500,
                min_value=10,
                max_value=10000,
                group="editor",
                apply_change=env_sync("WORKFLOW_SESSION_LOG_LIMIT"),
            ),
        ]
