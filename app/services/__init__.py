"""Service package public API definitions.

Service implementations depend on ``app.clients.data_service`` which in turn
imports ``app.services.exceptions``. Importing the implementations eagerly
here would make that a circular import, so they are resolved lazily on
first attribute access.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "PlatformAnalyticsService",
]

_SERVICE_MODULES = {
    "PlatformAnalyticsService": "platform_analytics",
}


def __getattr__(name: str) -> Any:
    if name not in _SERVICE_MODULES:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = import_module(f".{_SERVICE_MODULES[name]}", __name__)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from .platform_analytics import PlatformAnalyticsService as PlatformAnalyticsService
