"""finboard personal finance package."""

from __future__ import annotations

from .config import BaseConfig, TestConfig
from .context import create_app_context

__all__ = ["BaseConfig", "TestConfig", "create_app_context"]
