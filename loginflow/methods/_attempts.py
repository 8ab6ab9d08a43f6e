"""
Shared bounded-attempt machinery for the input-driven sub-flows.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Optional

from .. import selectors as sig
from ..context import LoginContext
from ..errors import BoundedRetryExhausted
from ..models import AuthState, SubFlowAttempt
from ..prompt import ManualPromptRequest, request_manual_input

ValueSource = Callable[[SubFlowAttempt], Awaitable[Optional[str]]]
ValueSink = Callable[[str], Awaitable[bool]]


async def get_error_message(ctx: LoginContext, timeout_ms: int = 1000) -> Optional[str]:
    """Provider-reported error text on the current screen, if any."""
    if not await ctx.probe(sig.ERROR_MESSAGE, timeout_ms):
        return None
    text = await ctx.surface.read_text(sig.ERROR_MESSAGE)
    return text.strip() if text and text.strip() else None


async def get_subtitle_message(ctx: LoginContext, timeout_ms: int = 1000) -> Optional[str]:
    if not await ctx.probe(sig.SUBTITLE, timeout_ms):
        return None
    text = await ctx.surface.read_text(sig.SUBTITLE)
    return text.strip() if text and text.strip() else None


async def clear_input(ctx: LoginContext, field_id: str) -> bool:
    """Click the field, select all, delete. False when the field is gone."""
    if not await ctx.surface.click(field_id):
        return False
    return await ctx.surface.press_key("Control+A") and await ctx.surface.press_key("Backspace")


class BoundedInputFlow:
    """
    Base for sub-flows that obtain a value, fill it, and check the provider's verdict.

    Every obtain/fill/verify cycle consumes one attempt; rejected values clear
    the input before the next cycle. The budget running out raises
    ``BoundedRetryExhausted`` carrying the last error seen.
    """

    component = "LOGIN"
    state = AuthState.UNKNOWN
    clear_field_id: Optional[str] = None

    def __init__(self, ctx: LoginContext) -> None:
        self.ctx = ctx
        self.log = ctx.logger(type(self).__module__, self.component)

    def manual_source(self, question: str, validator: Callable[[str], bool]) -> ValueSource:
        async def _prompt(attempt: SubFlowAttempt) -> Optional[str]:
            timeout = self.ctx.config.manual_timeout_seconds
            request = ManualPromptRequest(
                question=f"{question} (waiting {timeout}s, {attempt.describe()}): ",
                timeout_seconds=timeout,
                validator=validator,
            )
            return await request_manual_input(self.ctx.manual_input, request)

        return _prompt

    async def on_rejected(self, attempt: SubFlowAttempt) -> None:
        if self.clear_field_id is None:
            return
        if await clear_input(self.ctx, self.clear_field_id):
            self.log.debug("input cleared for retry")
        else:
            self.log.warning("could not find the input to clear")

    async def run_attempts(
        self,
        source: ValueSource,
        sink: ValueSink,
        *,
        max_attempts: int | None = None,
        label: str = "input",
    ) -> str:
        attempt = SubFlowAttempt(max_attempts=max_attempts or self.ctx.config.max_attempts)

        while not attempt.exhausted:
            attempt.attempt_number += 1

            value = await source(attempt)
            if not value:
                attempt.last_error = f"missing or invalid {label}"
                self.log.warning(f"missing or invalid {label} ({attempt.describe()})")
                continue

            if not await sink(value):
                attempt.last_error = f"{label} field not found"
                self.log.error(f"could not fill {label} ({attempt.describe()})")
                continue

            await self.ctx.wait(0.5)
            if not await self.ctx.settle():
                self.log.debug("network idle timeout after submit")

            error = await get_error_message(self.ctx)
            if error:
                attempt.last_error = error
                self.log.warning(f"rejected: {error} ({attempt.describe()})")
                self.ctx.emit(
                    "login_subflow_rejected",
                    {"state": str(self.state), "attempt": attempt.attempt_number, "error": error},
                )
                if not attempt.exhausted:
                    await self.on_rejected(attempt)
                continue

            return value

        raise BoundedRetryExhausted(
            f"{label} failed after {attempt.max_attempts} attempts",
            attempts=attempt.attempt_number,
            last_error=attempt.last_error,
            state=self.state,
        )
