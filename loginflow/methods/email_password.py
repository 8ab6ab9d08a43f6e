from __future__ import annotations

from .. import selectors as sig
from ..context import LoginContext


class EmailPasswordLogin:
    """Fills the username and password screens. Missing fields are not fatal."""

    def __init__(self, ctx: LoginContext) -> None:
        self.ctx = ctx
        self.email_log = ctx.logger(__name__, "LOGIN-ENTER-EMAIL")
        self.password_log = ctx.logger(__name__, "LOGIN-ENTER-PASSWORD")

    async def _replace_value(self, field_id: str, value: str) -> None:
        await self.ctx.wait(1.0)
        await self.ctx.surface.fill(field_id, "")
        await self.ctx.wait(0.5)
        await self.ctx.surface.fill(field_id, value)
        await self.ctx.wait(1.0)

    async def enter_email(self, email: str) -> bool:
        if not await self.ctx.probe(sig.EMAIL_FIELD, 1000):
            self.email_log.warning("email field not found")
            return False

        if await self.ctx.probe(sig.PREFILLED_EMAIL, 1000):
            self.email_log.info("email already prefilled")
        else:
            await self._replace_value(sig.EMAIL_FIELD, email)

        await self.ctx.probe(sig.SUBMIT_BUTTON, 2000)
        await self.ctx.surface.click(sig.SUBMIT_BUTTON)
        self.email_log.info("email submitted")
        return True

    async def enter_password(self, password: str | None) -> bool:
        if not password:
            self.password_log.warning("no password configured for this account")
            return False

        if not await self.ctx.probe(sig.PASSWORD_FIELD, 1000):
            self.password_log.warning("password field not found")
            return False

        await self._replace_value(sig.PASSWORD_FIELD, password)

        if await self.ctx.probe(sig.SUBMIT_BUTTON, 2000):
            await self.ctx.surface.click(sig.SUBMIT_BUTTON)
            self.password_log.info("password submitted")
        else:
            self.password_log.warning("submit button not visible after password entry")
        return True
