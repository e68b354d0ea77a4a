"""Runtime settings read from the environment (and a ``.env`` file)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .reduction import DEFAULT_MAX_STEPS
from .result import Err, Ok, Result


@dataclass(frozen=True)
class Settings:
    max_steps: int = DEFAULT_MAX_STEPS
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> Result["Settings", Exception]:
        """Load TREEQ_MAX_STEPS and TREEQ_LOG_LEVEL, falling back to defaults."""
        load_dotenv()
        raw_steps = os.getenv("TREEQ_MAX_STEPS")
        raw_level = os.getenv("TREEQ_LOG_LEVEL")

        match raw_steps:
            case None | "":
                max_steps = DEFAULT_MAX_STEPS
            case str(s) if s.strip().isascii() and s.strip().isdigit() and int(s) > 0:
                max_steps = int(s)
            case _:
                return Err(ValueError(f"TREEQ_MAX_STEPS must be a positive integer, got {raw_steps!r}"))

        match raw_level:
            case None | "":
                log_level = "WARNING"
            case str(level) if isinstance(logging.getLevelName(level.strip().upper()), int):
                log_level = level.strip().upper()
            case _:
                return Err(ValueError(f"TREEQ_LOG_LEVEL is not a logging level: {raw_level!r}"))

        return Ok(cls(max_steps=max_steps, log_level=log_level))
