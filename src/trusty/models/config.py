"""Configuration models for Trusty.

BackendConfig selects and addresses the chat backend.
ReportConfig addresses the package report endpoint.
TrustyConfig groups both with the per-turn time bound.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

DEFAULT_REPORT_URL = "https://api.trustypkg.dev"


class BackendConfig(BaseModel):
    """Chat backend settings."""

    provider: Literal["ollama", "openai"] = "ollama"
    host: Optional[str] = None  # provider default when unset
    model: str = "qwen2.5"
    api_key: Optional[str] = None  # openai only
    max_retries: int = Field(default=1, ge=1)  # 1 = single attempt


class ReportConfig(BaseModel):
    """Package report lookup settings."""

    base_url: str = DEFAULT_REPORT_URL
    timeout: float = Field(default=30.0, gt=0)


class TrustyConfig(BaseModel):
    """Top-level configuration."""

    backend: BackendConfig = Field(default_factory=BackendConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    turn_timeout: float = Field(default=30.0, gt=0)
