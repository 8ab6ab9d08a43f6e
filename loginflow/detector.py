"""
State detection and priority resolution.

``StateDetector.detect()`` turns one round of observations into candidate
states; ``resolve_state()`` collapses any candidate set into exactly one
``AuthState`` with a fixed precedence, so detection never ties.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Optional

from . import selectors as sig
from .context import LoginContext
from .models import Account, AuthState

# Probe battery, in probe order. Several signals may map to one state.
PROBE_BATTERY: tuple[tuple[str, AuthState], ...] = (
    (sig.ERROR_ALERT, AuthState.ERROR_ALERT),
    (sig.PASSWORD_ENTRY, AuthState.PASSWORD_INPUT),
    (sig.EMAIL_ENTRY, AuthState.EMAIL_INPUT),
    (sig.RECOVERY_EMAIL, AuthState.RECOVERY_EMAIL_INPUT),
    (sig.KMSI_VIDEO, AuthState.KMSI_PROMPT),
    (sig.PASSKEY_VIDEO, AuthState.PASSKEY_VIDEO),
    (sig.PASSKEY_ERROR, AuthState.PASSKEY_ERROR),
    (sig.PASSWORD_TILE, AuthState.SIGN_IN_ANOTHER_WAY),
    (sig.EMAIL_TILE, AuthState.SIGN_IN_ANOTHER_WAY_EMAIL),
    (sig.EMAIL_TILE_LEGACY, AuthState.SIGN_IN_ANOTHER_WAY_EMAIL),
    (sig.PASSWORDLESS_CHECK, AuthState.LOGIN_PASSWORDLESS),
    (sig.TOTP_INPUT, AuthState.TOTP_2FA),
    (sig.TOTP_FORM_LEGACY, AuthState.TOTP_2FA),
    (sig.OTP_CODE_ENTRY, AuthState.OTP_CODE_ENTRY),
    (sig.OTP_INPUT, AuthState.OTP_CODE_ENTRY),
)

# Most to least urgent. Blocking prompts outrank content states; a configured
# password beats any emailed-code path.
PRIORITY: tuple[AuthState, ...] = (
    AuthState.ACCOUNT_LOCKED,
    AuthState.PASSKEY_VIDEO,
    AuthState.PASSKEY_ERROR,
    AuthState.KMSI_PROMPT,
    AuthState.PASSWORD_INPUT,
    AuthState.EMAIL_INPUT,
    AuthState.SIGN_IN_ANOTHER_WAY,
    AuthState.SIGN_IN_ANOTHER_WAY_EMAIL,
    AuthState.OTP_CODE_ENTRY,
    AuthState.GET_A_CODE,
    AuthState.GET_A_CODE_2,
    AuthState.LOGIN_PASSWORDLESS,
    AuthState.TOTP_2FA,
)


def get_a_code_variant(account: Optional[Account]) -> AuthState:
    return AuthState.GET_A_CODE if account is not None and account.password else AuthState.GET_A_CODE_2


def resolve_state(
    candidates: Sequence[AuthState], *, host: str, identity_host: str
) -> AuthState:
    """
    Collapse candidate states into one.

    An error banner only counts on the identity provider's own host and never
    while a TOTP challenge is showing; when it does count it is fatal, so it
    outranks everything except an account lock.
    """
    found = list(dict.fromkeys(candidates))
    if not found:
        return AuthState.UNKNOWN

    if AuthState.ACCOUNT_LOCKED in found:
        return AuthState.ACCOUNT_LOCKED

    if AuthState.ERROR_ALERT in found:
        if host != identity_host or AuthState.TOTP_2FA in found:
            found = [s for s in found if s is not AuthState.ERROR_ALERT]
        else:
            return AuthState.ERROR_ALERT

    if not found:
        return AuthState.UNKNOWN

    for state in PRIORITY:
        if state in found:
            return state
    return found[0]


class StateDetector:
    def __init__(self, ctx: LoginContext) -> None:
        self.ctx = ctx
        self.log = ctx.logger(__name__, "DETECT-STATE")

    async def _visible(self, signal_id: str) -> bool:
        try:
            return await self.ctx.probe(signal_id)
        except Exception as e:
            self.log.debug(f"probe {signal_id} failed: {e}")
            return False

    async def candidates(self, account: Optional[Account] = None) -> list[AuthState]:
        """Run the probe battery plus the contextual get-a-code inference."""
        results = await asyncio.gather(*(self._visible(signal) for signal, _state in PROBE_BATTERY))
        found = [state for (_signal, state), visible in zip(PROBE_BATTERY, results) if visible]
        if found:
            self.log.debug(f"visible states: [{', '.join(str(s) for s in found)}]")

        banner, primary = await asyncio.gather(
            self._visible(sig.IDENTITY_BANNER), self._visible(sig.PRIMARY_BUTTON)
        )
        password = AuthState.PASSWORD_INPUT in found
        if banner and primary and not password and AuthState.TOTP_2FA not in found:
            code_state = get_a_code_variant(account)
            self.log.debug(
                f"get-a-code screen: {code_state} (has password: {bool(account and account.password)})"
            )
            found.append(code_state)
        return found

    async def detect(self, account: Optional[Account] = None) -> AuthState:
        cfg = self.ctx.config
        if not await self.ctx.settle():
            self.log.debug("settle timed out before detection")

        location = await self.ctx.surface.current_location()
        self.log.debug(f"location: {location.host}{location.path}")

        if location.host == cfg.browser_error_host:
            self.log.warning("browser error page detected")
            return AuthState.CHROMEWEBDATA_ERROR

        if await self._visible(sig.ACCOUNT_LOCKED):
            self.log.debug("account lock indicator found")
            return AuthState.ACCOUNT_LOCKED

        if location.host in cfg.success_hosts:
            self.log.debug("on rewards/account host, assuming signed in")
            return AuthState.LOGGED_IN

        found = await self.candidates(account)
        state = resolve_state(found, host=location.host, identity_host=cfg.identity_host)
        if AuthState.ERROR_ALERT in found and state is not AuthState.ERROR_ALERT:
            self.log.debug(f"error alert suppressed on {location.host}")
        self.log.debug(f"resolved state: {state}")
        return state
