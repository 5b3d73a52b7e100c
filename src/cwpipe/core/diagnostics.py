"""
Structured internal diagnostics.

Non-fatal conditions inside the library (token renewals, bootstrap retries,
background loop termination) are reported here rather than raised. Payloads
are JSON objects routed through the ``cwpipe.diagnostics`` standard logger so
applications can attach their own handlers.

Emission is gated by ``Settings().internal_logging_enabled``. The flag is read
once and cached; tests reset ``_internal_logging_enabled`` to ``None`` to
force a re-read.
"""

from __future__ import annotations

import json
import logging
from typing import Any

_logger = logging.getLogger("cwpipe.diagnostics")

_internal_logging_enabled: bool | None = None


def _enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(Settings().internal_logging_enabled)
        except Exception:
            _internal_logging_enabled = False
    return _internal_logging_enabled


def _emit(level: int, component: str, message: str, fields: dict[str, Any]) -> None:
    if not _enabled():
        return
    payload = {"component": component, "message": message, **fields}
    try:
        _logger.log(level, json.dumps(payload, default=str))
    except Exception:
        # Diagnostics never propagate into the caller
        pass


def warn(component: str, message: str, **fields: Any) -> None:
    """Emit a WARNING diagnostic for ``component``."""
    _emit(logging.WARNING, component, message, fields)


def debug(component: str, message: str, **fields: Any) -> None:
    _emit(logging.DEBUG, component, message, fields)


def set_enabled(enabled: bool) -> None:
    """Override the cached setting (useful for CLIs and tests)."""
    global _internal_logging_enabled
    _internal_logging_enabled = bool(enabled)
