"""
CLI Context for managing application dependencies.

Holds settings and the lazily created ImagesService for one CLI invocation,
avoiding global state and enabling injection in tests.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .service import ImagesService
from .settings import Settings, create_settings_from_env


@dataclass
class CLIContext:
    """Shared context for CLI commands."""
    settings: Settings
    _service: Optional[ImagesService] = None

    @classmethod
    def from_env(cls) -> CLIContext:
        return cls(settings=create_settings_from_env())

    @property
    def service(self) -> ImagesService:
        """Service created on first access and reused within the command."""
        if self._service is None:
            self._service = ImagesService.from_settings(self.settings)
        return self._service
