from __future__ import annotations

from typing import Optional

from .. import selectors as sig
from ..models import AuthState, SubFlowAttempt
from ..prompt import is_email_address
from ._attempts import BoundedInputFlow


class RecoveryLogin(BoundedInputFlow):
    component = "LOGIN-RECOVERY"
    state = AuthState.RECOVERY_EMAIL_INPUT
    clear_field_id = sig.RECOVERY_EMAIL

    async def fill_email(self, email: str) -> bool:
        if not await self.ctx.probe(sig.RECOVERY_EMAIL, 500):
            self.log.warning("recovery email field not found")
            return False
        surface = self.ctx.surface
        if not await surface.type_text(email, delay_ms=50) or not await surface.press_key("Enter"):
            self.log.warning("could not submit the recovery email")
            return False
        self.log.info("recovery email submitted")
        return True

    async def on_rejected(self, attempt: SubFlowAttempt) -> None:
        await super().on_rejected(attempt)
        await self.ctx.wait(1.0)

    async def handle(self, recovery_email: Optional[str]) -> None:
        """
        Confirm the account's recovery address.

        A configured address gets exactly one attempt: if the provider rejects
        it, prompting a human for a different one would not help. Without one,
        up to ``max_attempts`` email-shaped answers are requested.
        """
        self.log.info("recovery email verification started")

        if recovery_email:
            self.log.info("using configured recovery email")

            async def _configured(_attempt: SubFlowAttempt) -> Optional[str]:
                return recovery_email

            await self.run_attempts(_configured, self.fill_email, max_attempts=1, label="recovery email")
        else:
            self.log.info("no recovery email configured, prompting")
            source = self.manual_source("Recovery email", is_email_address)
            await self.run_attempts(source, self.fill_email, label="recovery email")

        self.log.info("recovery email verification completed")
