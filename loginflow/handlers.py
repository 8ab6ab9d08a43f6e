"""
One action per authentication state.

Each handler returns ``True`` to keep the loop going and ``False`` to abort.
Terminal screens raise instead of returning.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from . import selectors as sig
from .context import LoginContext
from .errors import TerminalAccountError
from .methods import CodeLogin, EmailPasswordLogin, PasswordlessLogin, RecoveryLogin, TotpLogin
from .models import AuthState

StateHandler = Callable[[], Awaitable[bool]]


class StateHandlers:
    def __init__(self, ctx: LoginContext) -> None:
        self.ctx = ctx
        self.log = ctx.logger(__name__, "LOGIN")
        self.dispatch_log = ctx.logger(__name__, "HANDLE-STATE")
        self.email_password = EmailPasswordLogin(ctx)
        self.totp = TotpLogin(ctx)
        self.code = CodeLogin(ctx)
        self.recovery = RecoveryLogin(ctx)
        self.passwordless = PasswordlessLogin(ctx)
        self.table = self._build_table()

    def _build_table(self) -> dict[AuthState, StateHandler]:
        table: dict[AuthState, StateHandler] = {
            AuthState.ACCOUNT_LOCKED: self.account_locked,
            AuthState.ERROR_ALERT: self.error_alert,
            AuthState.LOGGED_IN: self.logged_in,
            AuthState.EMAIL_INPUT: self.email_input,
            AuthState.PASSWORD_INPUT: self.password_input,
            AuthState.GET_A_CODE: self.get_a_code,
            AuthState.GET_A_CODE_2: self.get_a_code_no_password,
            AuthState.SIGN_IN_ANOTHER_WAY_EMAIL: self.sign_in_another_way_email,
            AuthState.RECOVERY_EMAIL_INPUT: self.recovery_email_input,
            AuthState.CHROMEWEBDATA_ERROR: self.browser_error,
            AuthState.TOTP_2FA: self.totp_2fa,
            AuthState.SIGN_IN_ANOTHER_WAY: self.sign_in_another_way,
            AuthState.KMSI_PROMPT: self.kmsi_prompt,
            AuthState.PASSKEY_VIDEO: self.skip_passkey,
            AuthState.PASSKEY_ERROR: self.skip_passkey,
            AuthState.LOGIN_PASSWORDLESS: self.login_passwordless,
            AuthState.OTP_CODE_ENTRY: self.otp_code_entry,
            AuthState.UNKNOWN: self.unknown,
        }
        missing = [state for state in AuthState if state not in table]
        if missing:
            raise RuntimeError(f"no handler for states: {', '.join(str(s) for s in missing)}")
        return table

    async def handle(self, state: AuthState) -> bool:
        self.dispatch_log.debug(f"handling state: {state}")
        self.ctx.emit("login_handle_state", {"state": str(state)})
        return await self.table[state]()

    async def _settle(self, after: str) -> None:
        if not await self.ctx.settle():
            self.log.debug(f"network idle timeout after {after}")

    async def _click_if_visible(self, target_id: str, timeout_ms: int) -> bool:
        if not await self.ctx.probe(target_id, timeout_ms):
            return False
        await self.ctx.surface.click(target_id)
        return True

    async def _read_alert(self, target_id: str, default: str) -> str:
        text = await self.ctx.surface.read_text(target_id)
        return text.strip() if text and text.strip() else default

    # terminal

    async def account_locked(self) -> bool:
        message = await self._read_alert(sig.ACCOUNT_LOCKED, "account locked")
        self.log.error(f"this account has been locked: {message}")
        raise TerminalAccountError(
            f"account locked: {message}", state=AuthState.ACCOUNT_LOCKED, reason_code="account_locked"
        )

    async def error_alert(self) -> bool:
        message = await self._read_alert(sig.ERROR_ALERT, "unknown error")
        self.log.error(f"account error: {message}")
        raise TerminalAccountError(
            f"identity provider error: {message}", state=AuthState.ERROR_ALERT, reason_code="provider_error"
        )

    async def logged_in(self) -> bool:
        return True

    # credential entry

    async def email_input(self) -> bool:
        self.log.info("entering email")
        await self.email_password.enter_email(self.ctx.account.email)
        await self._settle("email entry")
        return True

    async def password_input(self) -> bool:
        self.log.info("entering password")
        await self.email_password.enter_password(self.ctx.account.password)
        await self._settle("password entry")
        return True

    async def totp_2fa(self) -> bool:
        self.log.info("TOTP two-factor required")
        await self.totp.handle(self.ctx.account.totp_secret)
        return True

    async def recovery_email_input(self) -> bool:
        self.log.info("recovery email challenge detected")
        await self._settle("recovery page load")
        await self.recovery.handle(self.ctx.account.recovery_email)
        return True

    async def login_passwordless(self) -> bool:
        self.log.info("handling passwordless sign-in")
        await self.passwordless.handle()
        await self._settle("passwordless approval")
        return True

    # method pickers and code screens

    async def get_a_code(self) -> bool:
        """Leave the code screen for the password path: other-ways link, footer, then back."""
        self.log.info('trying to bypass the "get a code" screen')

        if await self._click_if_visible(sig.OTHER_WAYS_TO_SIGN_IN, 3000):
            self.log.info('clicked "other ways to sign in"')
        elif await self._click_if_visible(sig.VIEW_FOOTER, 2000):
            self.log.info("clicked footer link")
        elif await self._click_if_visible(sig.BACK_BUTTON, 2000):
            self.log.info("clicked back button")
        else:
            self.log.warning('no way out of the "get a code" screen found')
            return True

        await self._settle("get-a-code bypass")
        return True

    async def get_a_code_no_password(self) -> bool:
        self.log.info('handling "get a code" flow')
        await self.ctx.surface.click(sig.PRIMARY_BUTTON)
        await self._settle("primary button click")
        await self.code.handle()
        return True

    async def sign_in_another_way(self) -> bool:
        self.log.info('selecting "use my password"')
        await self.ctx.surface.click(sig.PASSWORD_TILE)
        await self._settle("password tile click")
        return True

    async def sign_in_another_way_email(self) -> bool:
        self.log.info('selecting "send a code to my email"')

        for tile in (sig.EMAIL_TILE, sig.EMAIL_TILE_LEGACY):
            if await self.ctx.probe(tile):
                break
        else:
            self.log.warning("email tile not found")
            return False

        self.log.debug(f"using email tile {tile}")
        await self.ctx.surface.click(tile)
        await self._settle("email tile click")
        await self.code.handle()
        return True

    async def otp_code_entry(self) -> bool:
        self.log.info("one-time code screen, looking for the password option")

        if await self._click_if_visible(sig.VIEW_FOOTER, 2000):
            self.log.info("clicked footer link")
        elif await self._click_if_visible(sig.BACK_BUTTON, 2000):
            self.log.info("clicked back button")
        else:
            self.log.warning("no navigation option on the code screen")

        await self._settle("code screen navigation")
        return True

    # prompts

    async def kmsi_prompt(self) -> bool:
        self.log.info("accepting stay-signed-in prompt")
        await self.ctx.surface.click(sig.PRIMARY_BUTTON)
        await self._settle("stay-signed-in accept")
        return True

    async def skip_passkey(self) -> bool:
        self.log.info("skipping passkey prompt")
        await self.ctx.surface.click(sig.SECONDARY_BUTTON)
        await self._settle("passkey skip")
        return True

    # recovery

    async def browser_error(self) -> bool:
        cfg = self.ctx.config
        self.log.warning("browser error page, recovering")
        if await self.ctx.surface.navigate(cfg.base_url, "domcontentloaded", cfg.navigation_timeout_ms):
            self.log.info(f"recovered by navigating to {cfg.base_url}")
        else:
            self.log.warning(f"falling back to {cfg.identity_root_url}")
            await self.ctx.surface.navigate(cfg.identity_root_url, "domcontentloaded", cfg.navigation_timeout_ms)
        await self.ctx.wait(3.0)
        return True

    async def unknown(self) -> bool:
        location = await self.ctx.surface.current_location()
        self.log.warning(f"unknown state at {location.host}{location.path}, waiting")
        return True
