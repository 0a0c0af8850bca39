"""Configuration models for focuscycle.

``SessionConfig`` is the validated, immutable settings object consumed by the
session controller. Invalid values are rejected here, at construction, so the
state machine never sees them.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TickSound = Literal["none", "soft", "classic", "digital"]


class SessionConfig(BaseModel):
    """Work/break cycle settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    work_duration_min: int = Field(default=25, gt=0)
    break_duration_min: int = Field(default=5, gt=0)
    long_break_duration_min: int = Field(default=15, gt=0)
    long_break_interval: int = Field(
        default=4, ge=1, description="Completed work sessions before a long break"
    )
    long_break_enabled: bool = Field(default=True)

    tick_interval_sec: int = Field(default=0, ge=0, description="0 disables ticks")
    tick_sound: TickSound = Field(default="none")
    short_break_sound: str = Field(default="gentle")
    long_break_sound: str = Field(default="bell")
    resume_sound: str = Field(default="digital")

    auto_start: bool = Field(default=False, description="Auto-advance break to work")
    pause_allowed: bool = Field(default=True)
    auto_reset_daily: bool = Field(default=True)
    auto_log: bool = Field(default=True)
    log_breaks: bool = Field(default=False)
    grace_delay_sec: float = Field(
        default=1.0, ge=0, description="Delay between work complete and break start"
    )

    @property
    def work_duration_ms(self) -> int:
        return self.work_duration_min * 60_000

    @property
    def ticks_enabled(self) -> bool:
        return self.tick_interval_sec > 0 and self.tick_sound != "none"

    def is_long_break(self, cycle_count: int) -> bool:
        """Whether the break following ``cycle_count`` completed sessions is long."""
        return (
            self.long_break_enabled
            and cycle_count > 0
            and cycle_count % self.long_break_interval == 0
        )

    def break_duration_for(self, cycle_count: int) -> int:
        """Break length in minutes after ``cycle_count`` completed sessions."""
        if self.is_long_break(cycle_count):
            return self.long_break_duration_min
        return self.break_duration_min


class OutputConfig(BaseModel):
    """Output configuration."""

    format: str = Field(default="pretty")
    color: bool = Field(default=True)
    sounds_muted: bool = Field(default=False)


class AppConfig(BaseModel):
    """Main focuscycle configuration."""

    session: SessionConfig = Field(default_factory=SessionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
