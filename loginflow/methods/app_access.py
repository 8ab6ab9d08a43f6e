"""
OAuth authorization-code exchange for the rewards mobile app token.

Runs on an already signed-in surface: the authorize page normally redirects
straight back with a ``code``, which is then exchanged over HTTP.
"""

from __future__ import annotations

import secrets
from typing import Optional
from urllib.parse import urlencode

import httpx

from .. import selectors as sig
from ..context import LoginContext

CLIENT_ID = "0000000040170455"
AUTHORIZE_URL = "https://login.live.com/oauth20_authorize.srf"
REDIRECT_URL = "https://login.live.com/oauth20_desktop.srf"
TOKEN_URL = "https://login.microsoftonline.com/consumers/oauth2/v2.0/token"
SCOPE = "service::prod.rewardsplatform.microsoft.com::MBI_SSL"
REDIRECT_HOST = "login.live.com"
REDIRECT_PATH = "/oauth20_desktop.srf"


def build_authorize_url(email: str, state: Optional[str] = None) -> str:
    params = {
        "response_type": "code",
        "client_id": CLIENT_ID,
        "redirect_uri": REDIRECT_URL,
        "scope": SCOPE,
        "state": state or secrets.token_hex(16),
        "access_type": "offline_access",
        "login_hint": email,
    }
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


class AppAccessLogin:
    """
    Obtain an app access token. Failures are logged and yield ``""``.

    Args:
        ctx: Run context (surface, config, logger).
        client: Optional ``httpx.AsyncClient``; one is created per call otherwise.
        timeout_s: Budget for the redirect to appear, polled once per second.
    """

    def __init__(
        self,
        ctx: LoginContext,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_s: int = 180,
    ) -> None:
        self.ctx = ctx
        self.client = client
        self.timeout_s = timeout_s
        self.log = ctx.logger(__name__, "LOGIN-APP")

    async def _skip_passkey_prompt(self) -> None:
        if await self.ctx.probe(sig.PASSKEY_ERROR) or await self.ctx.probe(sig.PASSKEY_VIDEO):
            self.log.info("passkey prompt on OAuth page, skipping")
            await self.ctx.surface.click(sig.SECONDARY_BUTTON)
            await self.ctx.settle()

    async def wait_for_code(self) -> str:
        last_url = ""
        for _ in range(self.timeout_s):
            location = await self.ctx.surface.current_location()
            if location.url != last_url:
                self.log.debug(f"OAuth poll url changed -> {location.host}{location.path}")
                last_url = location.url

            if location.host == REDIRECT_HOST and location.path == REDIRECT_PATH:
                code = location.query_value("code")
                if code:
                    self.log.debug("OAuth code found in redirect url")
                    return code

            await self._skip_passkey_prompt()
            await self.ctx.wait(1.0)
        return ""

    async def exchange_code(self, code: str) -> str:
        data = {
            "grant_type": "authorization_code",
            "client_id": CLIENT_ID,
            "code": code,
            "redirect_uri": REDIRECT_URL,
        }
        if self.client is not None:
            response = await self.client.post(TOKEN_URL, data=data)
        else:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.post(TOKEN_URL, data=data)
        response.raise_for_status()
        payload = response.json()
        token = payload.get("access_token") or ""
        if not token:
            self.log.warning("no access_token in token response")
            self.log.debug(f"token response keys: {sorted(payload)}")
        return token

    async def get(self, email: str) -> str:
        surface = self.ctx.surface
        try:
            if self.ctx.config.disable_fido:
                disable = getattr(surface, "disable_fido", None)
                if callable(disable):
                    await disable()

            self.log.debug("navigating to OAuth authorize url")
            await surface.navigate(build_authorize_url(email))

            self.log.info("waiting for mobile OAuth code...")
            code = await self.wait_for_code()
            if not code:
                location = await surface.current_location()
                self.log.warning(f"timed out waiting for OAuth code after {self.timeout_s}s")
                self.log.debug(f"final location: {location.host}{location.path}")
                return ""

            self.log.debug("exchanging OAuth code for access token")
            token = await self.exchange_code(code)
            if token:
                self.log.info("mobile access token received")
            return token
        except Exception as e:
            self.log.error(f"app access error: {e}")
            return ""
        finally:
            self.log.debug("returning to base url")
            await surface.navigate(self.ctx.config.base_url)
