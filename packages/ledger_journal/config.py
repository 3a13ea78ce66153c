"""Parser settings.

Settings come from keyword overrides, then ``LEDGER_JOURNAL_*`` environment
variables, then defaults. A local ``.env`` (searched upward from the current
working directory) is loaded with ``python-dotenv`` first; it never overrides
variables that are already set. Values are validated by pydantic, so a bad
``LEDGER_JOURNAL_MAX_WORKERS=0`` fails loudly instead of being ignored.

Environment variables:

- ``LEDGER_JOURNAL_MAX_WORKERS``: concurrent sub-parses per include line.
- ``LEDGER_JOURNAL_QUEUE_SIZE``: bound of the streaming transaction queue
  (``0`` means unbounded).
- ``LEDGER_JOURNAL_POLL_INTERVAL``: seconds a blocked producer waits before
  re-checking for cancellation.
- ``LEDGER_JOURNAL_DATE_FORMATS``: comma-separated ``strptime`` layouts.
"""

from __future__ import annotations

import os
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .header import DEFAULT_DATE_FORMATS

_ENV_PREFIX = "LEDGER_JOURNAL_"


class ParserSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Capped to avoid oversubscribing threads on large include fan-outs.
    max_workers: int = Field(default=8, ge=1, le=32)
    queue_size: int = Field(default=100, ge=0)
    poll_interval: float = Field(default=0.05, gt=0)
    date_formats: tuple[str, ...] = DEFAULT_DATE_FORMATS

    @field_validator("date_formats", mode="before")
    @classmethod
    def _split_formats(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [part.strip() for part in v.split(",")]
        return v

    @field_validator("date_formats")
    @classmethod
    def _formats_non_empty(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        formats = tuple(f for f in v if f)
        if not formats:
            raise ValueError("date_formats must contain at least one layout")
        return formats


def load_settings(**overrides: Any) -> ParserSettings:
    """Build :class:`ParserSettings` from overrides, the environment and defaults."""

    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path, override=False)

    values: dict[str, Any] = {}
    for name in ParserSettings.model_fields:
        raw = os.getenv(_ENV_PREFIX + name.upper())
        if raw is not None and raw.strip():
            values[name] = raw.strip()
    values.update(overrides)
    return ParserSettings.model_validate(values)


__all__ = ["ParserSettings", "load_settings"]
