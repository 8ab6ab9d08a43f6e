"""
Post sign-in confirmation and session capture.

Runs only after the main loop reached ``LOGGED_IN``. Both confirmation loops
degrade to warnings: reaching the rewards host is already sufficient.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Optional

from . import selectors as sig
from .context import LoginContext
from .log import mask
from .models import SessionArtifacts
from .session_store import SessionStore


class SessionFinalizer:
    def __init__(
        self,
        ctx: LoginContext,
        *,
        session_store: Optional[SessionStore] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ctx = ctx
        self.session_store = session_store
        self.clock = clock
        self.log = ctx.logger(__name__, "LOGIN")
        self.search_log = ctx.logger(__name__, "LOGIN-SEARCH")
        self.token_log = ctx.logger(__name__, "GET-REWARD-SESSION")

    async def dismiss_messages(self) -> int:
        """Click away incidental consent and welcome messages. Returns how many were dismissed."""
        surface = self.ctx.surface
        dismissed = 0
        for signal_id, _selector, label in sig.CONSENT_BUTTONS:
            if await self.ctx.probe(signal_id) and await surface.click(signal_id):
                self.log.debug(f"dismissed: {label}")
                dismissed += 1

        if await self.ctx.probe(sig.CONSENT_OVERLAY):
            if await surface.click(sig.CONSENT_OVERLAY_REJECT) or await surface.click(sig.CONSENT_OVERLAY_ACCEPT):
                self.log.debug("dismissed consent overlay")
                dismissed += 1
        return dismissed

    async def confirm_landing(self) -> bool:
        cfg = self.ctx.config
        await self.ctx.surface.navigate(cfg.base_url, "networkidle", cfg.navigation_timeout_ms)
        location = await self.ctx.surface.current_location()
        if location.host == cfg.rewards_host:
            self.log.info("signed in to the rewards dashboard")
            return True
        self.log.warning("could not confirm the rewards dashboard, assuming the session is valid")
        return False

    async def verify_search_session(self) -> bool:
        cfg = self.ctx.config
        surface = self.ctx.surface
        self.search_log.info("verifying search session")

        await surface.navigate(cfg.search_signin_url, "networkidle", cfg.navigation_timeout_ms)

        for i in range(cfg.finalizer_max_loops):
            if await surface.is_closed():
                break
            self.search_log.debug(f"verification loop {i + 1}/{cfg.finalizer_max_loops}")

            if await self.ctx.probe(sig.PASSKEY_ERROR):
                self.search_log.info("ignoring passkey error prompt")
                await surface.click(sig.SECONDARY_BUTTON)

            location = await surface.current_location()
            at_home = location.host == cfg.search_home_host and location.path == "/"
            self.search_log.debug(f"at search home: {at_home} ({location.host}{location.path})")

            if at_home:
                await self.dismiss_messages()
                signed_in = await self.ctx.probe(sig.SEARCH_PROFILE, 3000)
                self.search_log.debug(f"profile element found: {signed_in}")
                if signed_in or self.ctx.is_mobile:
                    self.search_log.info("search session verified")
                    return True

            await self.ctx.wait(1.0)

        self.search_log.warning("could not verify search session, continuing anyway")
        return False

    async def _read_token(self) -> Optional[str]:
        surface = self.ctx.surface
        token = await surface.read_attribute(sig.REQUEST_TOKEN, "value")
        if not token:
            token = await surface.read_attribute(sig.REQUEST_TOKEN_META, "content")
        return token or None

    async def fetch_request_token(self) -> Optional[str]:
        cfg = self.ctx.config
        surface = self.ctx.surface
        self.token_log.info("fetching request token")

        await surface.navigate(
            f"{cfg.base_url}?_={int(self.clock() * 1000)}", "networkidle", cfg.navigation_timeout_ms
        )

        for i in range(cfg.finalizer_max_loops):
            if await surface.is_closed():
                break
            self.token_log.debug(f"token loop {i + 1}/{cfg.finalizer_max_loops}")

            location = await surface.current_location()
            if location.host == cfg.rewards_host and location.path == "/":
                await self.dismiss_messages()
                token = await self._read_token()
                if token:
                    self.token_log.info(f"request token acquired: {mask(token)}")
                    return token
                self.token_log.debug("no token on page")
            else:
                self.token_log.debug(f"not on rewards home: {location.host}{location.path}")

            await self.ctx.wait(1.0)

        self.token_log.warning("request verification token not found, some activities may not work")
        return None

    async def finalize(self) -> SessionArtifacts:
        self.log.info("finalizing sign-in")

        await self.confirm_landing()
        await self.verify_search_session()
        token = await self.fetch_request_token()

        cookies = await self.ctx.surface.cookies()
        self.log.debug(f"retrieved {len(cookies)} cookies")

        artifacts = SessionArtifacts(
            email=self.ctx.account.email,
            is_mobile=self.ctx.is_mobile,
            cookies=cookies,
            session_token=token,
        )
        if self.session_store is not None:
            self.session_store.save(artifacts)
            self.log.info("sign-in complete, session saved")
        else:
            self.log.info("sign-in complete")
        self.ctx.emit(
            "login_finalized", {"cookies": len(cookies), "has_token": token is not None}
        )
        return artifacts
