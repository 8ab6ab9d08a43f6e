from __future__ import annotations

from typing import Optional

import pyotp

from .. import selectors as sig
from ..models import AuthState, SubFlowAttempt
from ..prompt import is_six_digit_code
from ._attempts import BoundedInputFlow


def generate_totp_code(secret: str) -> str:
    return pyotp.TOTP(secret.replace(" ", ""), digits=6).now()


class TotpLogin(BoundedInputFlow):
    """
    Authenticator-app challenge.

    With a stored secret the code is generated locally, fresh for each
    attempt, and the manual channel is never consulted.
    """

    component = "LOGIN-TOTP"
    state = AuthState.TOTP_2FA

    async def fill_code(self, code: str) -> bool:
        surface = self.ctx.surface
        if await self.ctx.probe(sig.TOTP_FIELD, 500) and await surface.fill(sig.TOTP_FIELD, code):
            self.log.info("filled TOTP input")
        elif await surface.fill(sig.TOTP_FIELD_SECONDARY, code):
            self.log.info("filled secondary TOTP input")
        else:
            self.log.warning("no TOTP input field found")
            return False

        await self.ctx.wait(0.5)
        await surface.click(sig.SUBMIT_BUTTON)
        return True

    async def handle(self, totp_secret: Optional[str]) -> None:
        self.log.info("TOTP two-factor authentication requested")

        if totp_secret:
            self.log.info("generating TOTP code from stored secret")

            async def _generated(_attempt: SubFlowAttempt) -> Optional[str]:
                return generate_totp_code(totp_secret)

            source = _generated
        else:
            self.log.info("no TOTP secret configured, waiting for manual input")
            source = self.manual_source("Enter the 6-digit TOTP code", is_six_digit_code)

        await self.run_attempts(source, self.fill_code, label="TOTP code")
        self.log.info("TOTP authentication completed")
