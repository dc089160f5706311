"""Configuration for the order workflow.

Settings are loaded from environment variables prefixed with
`ORDER_WORKFLOW_` and from a local `.env` file (if present).
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from order_workflow.logging import configure_logging


class OrderWorkflowSettings(BaseSettings):
    """Settings for the order workflow runtime and CLI.

    Environment variables:
    - ORDER_WORKFLOW_LOG_LEVEL   (optional)
    - ORDER_WORKFLOW_LOG_FORMAT  (optional, `json` or `text`)
    - ORDER_WORKFLOW_DEBUG       (optional)
    """

    log_level: str = Field(
        default="INFO",
        description="Root logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug logging for the order_workflow package",
    )

    model_config = SettingsConfigDict(
        env_prefix="ORDER_WORKFLOW_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        configure_logging(self.log_level, fmt=self.log_format)

        if self.debug:
            logging.getLogger("order_workflow").setLevel(logging.DEBUG)
