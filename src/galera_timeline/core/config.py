import os
from dataclasses import dataclass
from typing import Mapping, Optional

from galera_timeline.core.exceptions import ConfigError

COLOR_CHOICES = ("auto", "always", "never")
FORMAT_CHOICES = ("text", "json")


@dataclass
class Settings:
    """Runtime settings, read from the environment and overridden by CLI flags."""

    workers: int = 1
    color: str = "auto"
    output_format: str = "text"

    def __post_init__(self):
        if self.workers < 1:
            raise ConfigError(f"workers must be at least 1, got {self.workers}")
        if self.color not in COLOR_CHOICES:
            raise ConfigError(
                f"color must be one of {', '.join(COLOR_CHOICES)}, got {self.color!r}"
            )
        if self.output_format not in FORMAT_CHOICES:
            raise ConfigError(
                f"format must be one of {', '.join(FORMAT_CHOICES)}, got {self.output_format!r}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from GALERA_TIMELINE_* variables."""
        if environ is None:
            environ = os.environ

        raw_workers = environ.get("GALERA_TIMELINE_WORKERS", "1")
        try:
            workers = int(raw_workers)
        except ValueError:
            raise ConfigError(
                f"GALERA_TIMELINE_WORKERS must be an integer, got {raw_workers!r}"
            )

        return cls(
            workers=workers,
            color=environ.get("GALERA_TIMELINE_COLOR", "auto").lower(),
            output_format=environ.get("GALERA_TIMELINE_FORMAT", "text").lower(),
        )
