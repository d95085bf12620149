"""Settings file loader for calendars and scheduler policy.

A settings file (``planner.yaml``) looks like::

    calendars:
      pl:
        closed_days: [saturday, sunday]
        hours_per_day: 8
        public_holidays:
          - name: New Year
            dates: "2025-01-01"
          - name: Summer break
            dates: "2025-08-11:2025-08-15"
    default_calendar: pl
    scheduler:
      tie_break: id
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from .calendar import CalendarDefinition, WorkCalendar
from .exceptions import ConfigError
from .scheduler.config import SchedulingConfig


class PlannerConfig(BaseModel):
    """Calendars and scheduling policy shared by every project run."""

    calendars: dict[str, CalendarDefinition] = Field(default_factory=dict)
    default_calendar: str | None = None
    scheduler: SchedulingConfig = SchedulingConfig()

    @model_validator(mode="before")
    @classmethod
    def name_calendars(cls, data: Any) -> Any:
        """Fill each calendar's name from its key."""
        if isinstance(data, dict) and isinstance(data.get("calendars"), dict):
            calendars: dict[str, Any] = {}
            for key, value in data["calendars"].items():
                if isinstance(value, dict) and "name" not in value:
                    value = {**value, "name": key}
                calendars[key] = value
            data = {**data, "calendars": calendars}
        return data

    @model_validator(mode="after")
    def validate_default_calendar(self) -> PlannerConfig:
        """Ensure the default calendar is one of the defined calendars."""
        if self.default_calendar is not None and self.default_calendar not in self.calendars:
            raise ValueError(f"default_calendar '{self.default_calendar}' is not defined")
        return self

    def build_calendars(self) -> dict[str, WorkCalendar]:
        """Create a WorkCalendar for each definition."""
        return {
            name: WorkCalendar.from_definition(definition)
            for name, definition in self.calendars.items()
        }

    def get_calendar(self, name: str | None = None) -> WorkCalendar:
        """Build a named calendar, the default one, or the built-in Mon-Fri calendar."""
        key = name or self.default_calendar
        if key is None:
            return WorkCalendar()
        if key not in self.calendars:
            raise ConfigError(f"Unknown calendar: {key}")
        return WorkCalendar.from_definition(self.calendars[key])


def load_planner_config(config_path: Path | str) -> PlannerConfig:
    """Load planner settings from a YAML file.

    Args:
        config_path: Path to the settings file

    Returns:
        Validated PlannerConfig

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or fails validation
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML: {e}") from e

    if data is None:
        return PlannerConfig()
    if not isinstance(data, dict):
        raise ConfigError("Config must contain a dictionary at the root level")

    try:
        return PlannerConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid config in {config_path}: {e}") from e
