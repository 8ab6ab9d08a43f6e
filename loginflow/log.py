"""
Tagged logging for the sign-in flow.

Every record carries the device class (desktop/mobile) and a component tag,
both as a message prefix and as ``extra`` fields for structured handlers.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any


def device_label(is_mobile: bool) -> str:
    return "mobile" if is_mobile else "desktop"


class ComponentLogger(logging.LoggerAdapter):
    def __init__(self, logger: logging.Logger, *, component: str, is_mobile: bool) -> None:
        super().__init__(logger, {"component": component, "device": device_label(is_mobile)})
        self.component = component
        self.is_mobile = is_mobile

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return f"[{extra['device']}] [{extra['component']}] {msg}", kwargs


def get_logger(name: str, component: str, *, is_mobile: bool) -> ComponentLogger:
    return ComponentLogger(logging.getLogger(name), component=component, is_mobile=is_mobile)


def mask(value: str | None, keep: int = 10) -> str:
    """Truncate a secret-ish value for logs."""
    if not value:
        return ""
    return value[:keep] + "..." if len(value) > keep else value
