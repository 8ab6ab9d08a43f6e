"""
Surface protocol consumed by the sign-in state machine.

Targets are symbolic signal ids (see ``loginflow.selectors``). Observation
calls never raise; action calls are best-effort and report success as a bool.
"""

from __future__ import annotations

from typing import Literal, Protocol, runtime_checkable

from ..models import Cookie, Location

WaitPolicy = Literal["load", "domcontentloaded", "networkidle", "commit"]


@runtime_checkable
class LoginSurface(Protocol):
    async def probe(self, signal_id: str, timeout_ms: int) -> bool:
        """Whether ``signal_id`` is visible within ``timeout_ms``. Never raises."""
        ...

    async def fill(self, field_id: str, value: str) -> bool: ...

    async def click(self, target_id: str) -> bool: ...

    async def type_text(self, text: str, delay_ms: int = 50) -> bool: ...

    async def press_key(self, key: str) -> bool: ...

    async def navigate(
        self, url: str, wait_until: WaitPolicy = "domcontentloaded", timeout_ms: int = 10_000
    ) -> bool: ...

    async def reload(self, wait_until: WaitPolicy = "domcontentloaded") -> bool: ...

    async def current_location(self) -> Location: ...

    async def is_closed(self) -> bool: ...

    async def wait_settle(self, timeout_ms: int) -> bool:
        """Best-effort network-idle wait. Returns False on timeout."""
        ...

    async def read_text(self, target_id: str) -> str | None: ...

    async def read_attribute(self, target_id: str, attr: str) -> str | None: ...

    async def cookies(self) -> list[Cookie]: ...
