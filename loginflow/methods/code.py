from __future__ import annotations

from .. import selectors as sig
from ..models import AuthState
from ..prompt import is_six_digit_code
from ._attempts import BoundedInputFlow, get_subtitle_message


class CodeLogin(BoundedInputFlow):
    """One-time code sent by email. There is no stored secret, so it is always manual."""

    component = "LOGIN-CODE"
    state = AuthState.OTP_CODE_ENTRY
    clear_field_id = sig.CODE_INPUT_WRAPPER

    async def fill_code(self, code: str) -> bool:
        # The code boxes advance focus per digit, so the code is typed rather than filled.
        if await self.ctx.probe(sig.CODE_INPUT_WRAPPER, 500) or await self.ctx.probe(
            sig.CODE_FIELD_SECONDARY, 500
        ):
            if not await self.ctx.surface.type_text(code, delay_ms=50):
                self.log.warning("could not type the one-time code")
                return False
            self.log.info("typed one-time code")
            return True
        self.log.warning("no code input field found")
        return False

    async def handle(self) -> None:
        self.log.info("email code sign-in requested")

        destination = await get_subtitle_message(self.ctx)
        if destination:
            self.log.info(f'page message: "{destination}"')
        else:
            self.log.warning("could not read where the code was sent")

        source = self.manual_source("Enter the 6-digit code", is_six_digit_code)
        await self.run_attempts(source, self.fill_code, label="one-time code")
        self.log.info("code authentication completed")
