from __future__ import annotations

from typing import Optional

from .. import selectors as sig
from ..context import LoginContext
from ..errors import TimeoutExpired
from ..models import AuthState


class PasswordlessLogin:
    """Push approval on a trusted device. Nothing is filled; the path is polled."""

    def __init__(self, ctx: LoginContext) -> None:
        self.ctx = ctx
        self.log = ctx.logger(__name__, "LOGIN-PASSWORDLESS")

    async def displayed_number(self) -> Optional[str]:
        if not await self.ctx.probe(sig.PASSWORDLESS_NUMBER, 5000):
            return None
        text = await self.ctx.surface.read_text(sig.PASSWORDLESS_NUMBER)
        return text.strip() if text and text.strip() else None

    async def wait_for_approval(self) -> bool:
        max_polls = self.ctx.config.passwordless_max_polls
        approval_path = self.ctx.config.approval_path
        self.log.info(f"waiting for approval (timeout after {max_polls}s)")

        for poll in range(1, max_polls + 1):
            location = await self.ctx.surface.current_location()
            if location.path == approval_path:
                self.log.info("approval detected")
                return True
            if poll % 5 == 0:
                self.log.info(f"still waiting ({poll}/{max_polls}s elapsed)")
            await self.ctx.wait(1.0)

        self.log.warning(f"approval timed out after {max_polls}s")
        return False

    async def handle(self) -> None:
        self.log.info("passwordless sign-in requested")

        number = await self.displayed_number()
        if number:
            self.log.info(f"approve the sign-in and select number: {number}")
        else:
            self.log.info("approve the sign-in in your authenticator app")

        if not await self.wait_for_approval():
            raise TimeoutExpired(
                "passwordless approval timed out",
                timeout_s=float(self.ctx.config.passwordless_max_polls),
                state=AuthState.LOGIN_PASSWORDLESS,
            )

        self.log.info("sign-in approved")
        await self.ctx.settle()
