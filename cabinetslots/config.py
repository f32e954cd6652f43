"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import ClinicLayout

TOKEN_ENV_VAR = "CRM_API_TOKEN"


class CRMConfig(BaseModel):
    """Connection settings for the clinic CRM API."""
    base_url: str = "https://cliniccards.com/api"
    api_token: str = ""
    timeout_seconds: float = 30.0

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    def resolved_token(self) -> str:
        """Token from the config file, else from the CRM_API_TOKEN environment variable."""
        return self.api_token or os.environ.get(TOKEN_ENV_VAR, "")


class ClinicConfig(BaseModel):
    """Working hours and the cabinet/doctor ids known to the CRM."""
    work_start_hour: int = 9
    work_end_hour: int = 19
    appointment_duration: int = 30
    room1_id: str = "10000"
    room2_id: str = "20000"
    provider1_id: str = "11111"
    provider2_id: Optional[str] = None

    @field_validator("appointment_duration")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure appointment duration is positive."""
        if value <= 0:
            raise ValueError("appointment_duration must be greater than zero")
        return value

    @field_validator("work_start_hour", "work_end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 24."""
        if not 0 <= v <= 24:
            raise ValueError(f"Hour must be between 0 and 24, got {v}")
        return v

    @field_validator("room1_id", "room2_id", "provider1_id", "provider2_id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        """CRM ids are compared as strings; YAML may hand us integers."""
        if value is None:
            return value
        return str(value)

    @model_validator(mode="after")
    def validate_topology(self) -> "ClinicConfig":
        """Working day must open before it closes; ids must be distinct."""
        if self.work_end_hour <= self.work_start_hour:
            raise ValueError("work_end_hour must be later than work_start_hour")
        if self.room1_id == self.room2_id:
            raise ValueError("room1_id and room2_id must differ")
        if self.provider2_id and self.provider2_id == self.provider1_id:
            raise ValueError("provider1_id and provider2_id must differ")
        return self

    def to_layout(self) -> ClinicLayout:
        """Build the domain value passed to the availability engine."""
        return ClinicLayout(
            work_start_hour=self.work_start_hour,
            work_end_hour=self.work_end_hour,
            appointment_duration=self.appointment_duration,
            room1_id=self.room1_id,
            room2_id=self.room2_id,
            provider1_id=self.provider1_id,
            provider2_id=self.provider2_id or None,
        )


class AppConfig(BaseModel):
    """Application configuration."""
    crm: CRMConfig = Field(default_factory=CRMConfig)
    clinic: ClinicConfig = Field(default_factory=ClinicConfig)

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of cabinetslots/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
