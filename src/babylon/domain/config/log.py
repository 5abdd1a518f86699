"""Logging configuration model."""

from typing import Literal

from pydantic import BaseModel


class LoggingConfig(BaseModel):
    """Configuration for log output.

    Attributes:
        level: Minimum log level
        json_output: Emit one JSON object per line instead of human-readable text
    """

    level: Literal["debug", "info", "warning", "error"] = "info"
    json_output: bool = False
