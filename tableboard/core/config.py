"""Application settings and logging setup."""

from __future__ import annotations

import logging
import sys
from datetime import date

from pydantic_settings import BaseSettings, SettingsConfigDict

from tableboard.domain.models import TimelineConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Board settings, read from ``TABLEBOARD_*`` environment variables or ``.env``."""

    project_name: str = "Table Reservation Board"

    # Timeline window
    board_date: date = date(2025, 10, 15)
    start_hour: int = 11
    end_hour: int = 24
    slot_minutes: int = 15
    timezone: str = "America/Argentina/Buenos_Aires"
    cell_width_px: float = 60
    row_height_px: float = 60

    # Scheduling
    seed_reservation_count: int = 5
    include_cancelled: bool = True

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="TABLEBOARD_",
        env_file=".env",
        extra="ignore",
    )

    def timeline_config(self) -> TimelineConfig:
        return TimelineConfig(
            board_date=self.board_date,
            start_hour=self.start_hour,
            end_hour=self.end_hour,
            slot_minutes=self.slot_minutes,
            timezone=self.timezone,
            cell_width_px=self.cell_width_px,
            row_height_px=self.row_height_px,
        )


_handler: logging.Handler | None = None


def configure_logging(level: str = "INFO") -> None:
    """Send application logs to stdout. Safe to call more than once."""
    global _handler
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if _handler is not None and _handler in root.handlers:
        return
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(_handler)
