"""Git Timer configuration.

Values come from ``GIT_TIMER_*`` environment variables; command line options
override them.
"""

import tempfile
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_state_dir() -> Path:
    return Path(tempfile.gettempdir()) / "git-timer"


class TimerSettings(BaseSettings):
    """Settings shared by every Git Timer command."""

    state_dir: Path = Field(
        default_factory=_default_state_dir,
        description="Directory holding timer state and the duration log",
    )
    remote: str = Field(default="origin", description="Remote used when setting an upstream")
    default_message: str = Field(default="Commit", description="Message used when none is given")
    push: bool = Field(default=True, description="Push after committing or merging")
    log_file_name: str = Field(default="git_timer_log", description="Duration log file name")
    debug_log_name: str = Field(default="git-timer-debug.log", description="Debug log file name")

    model_config = SettingsConfigDict(env_prefix="GIT_TIMER_")

    @field_validator("default_message")
    @classmethod
    def validate_default_message(cls, v):
        if not v.strip():
            raise ValueError("Default message must not be empty")
        return v.strip()

    @property
    def duration_log_path(self) -> Path:
        return self.state_dir / self.log_file_name

    @property
    def debug_log_path(self) -> Path:
        return self.state_dir / self.debug_log_name
