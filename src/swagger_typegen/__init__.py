"""Swagger/OpenAPI to TypeScript generator package."""

from __future__ import annotations

from .cli import main
from .generator import CheckRun, UpdateRun, run_check, run_update

__all__ = ["CheckRun", "UpdateRun", "main", "run_check", "run_update"]
