"""
Playwright implementation of ``LoginSurface``.

Usage:
    from playwright.async_api import async_playwright
    from loginflow import Account, LoginFlow
    from loginflow.backends import PlaywrightSurface

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=False)
        page = await browser.new_page()
        flow = LoginFlow()
        artifacts = await flow.login(PlaywrightSurface(page), Account(email="me@example.com"))
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from ..models import Cookie, Location
from ..selectors import resolve_selector
from .protocol import WaitPolicy

if TYPE_CHECKING:
    from playwright.async_api import Page, Route

logger = logging.getLogger(__name__)

CREDENTIAL_TYPE_ROUTE = "**/GetCredentialType.srf*"


class PlaywrightSurface:
    """
    Wraps a Playwright ``Page`` behind the narrow surface protocol.

    Every Playwright error is caught here: observations degrade to "not
    observed" and actions to ``False``, so a flaky page never hangs or
    crashes the state machine.
    """

    def __init__(self, page: Page, *, click_wait_ms: int = 1_000, read_timeout_ms: int = 1_000) -> None:
        self._page = page
        self._click_wait_ms = click_wait_ms
        self._read_timeout_ms = read_timeout_ms

    @property
    def page(self) -> Page:
        return self._page

    async def probe(self, signal_id: str, timeout_ms: int) -> bool:
        try:
            await self._page.wait_for_selector(
                resolve_selector(signal_id), state="visible", timeout=timeout_ms
            )
            return True
        except Exception:
            return False

    async def fill(self, field_id: str, value: str) -> bool:
        try:
            await self._page.fill(resolve_selector(field_id), value)
            return True
        except Exception as e:
            logger.debug(f"fill({field_id}) failed: {e}")
            return False

    async def click(self, target_id: str) -> bool:
        selector = resolve_selector(target_id)
        try:
            await self._page.wait_for_selector(selector, timeout=self._click_wait_ms)
        except Exception:
            # Still try the click; the element may be attached but not yet reported.
            pass
        try:
            await self._page.click(selector)
            return True
        except Exception as e:
            logger.debug(f"click({target_id}) failed: {e}")
            return False

    async def type_text(self, text: str, delay_ms: int = 50) -> bool:
        try:
            await self._page.keyboard.type(text, delay=delay_ms)
            return True
        except Exception as e:
            logger.debug(f"type_text failed: {e}")
            return False

    async def press_key(self, key: str) -> bool:
        try:
            await self._page.keyboard.press(key)
            return True
        except Exception as e:
            logger.debug(f"press_key({key}) failed: {e}")
            return False

    async def navigate(
        self, url: str, wait_until: WaitPolicy = "domcontentloaded", timeout_ms: int = 10_000
    ) -> bool:
        try:
            await self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)
            return True
        except Exception as e:
            logger.debug(f"navigate({url}) failed: {e}")
            return False

    async def reload(self, wait_until: WaitPolicy = "domcontentloaded") -> bool:
        try:
            await self._page.reload(wait_until=wait_until)
            return True
        except Exception as e:
            logger.debug(f"reload failed: {e}")
            return False

    async def current_location(self) -> Location:
        try:
            return Location.from_url(self._page.url)
        except Exception as e:
            logger.debug(f"reading page url failed: {e}")
            return Location()

    async def is_closed(self) -> bool:
        return self._page.is_closed()

    async def wait_settle(self, timeout_ms: int) -> bool:
        try:
            await self._page.wait_for_load_state("networkidle", timeout=timeout_ms)
            return True
        except Exception:
            return False

    async def read_text(self, target_id: str) -> str | None:
        try:
            text = await self._page.locator(resolve_selector(target_id)).first.inner_text(
                timeout=self._read_timeout_ms
            )
        except Exception:
            return None
        text = (text or "").strip()
        return text or None

    async def read_attribute(self, target_id: str, attr: str) -> str | None:
        try:
            return await self._page.locator(resolve_selector(target_id)).first.get_attribute(
                attr, timeout=self._read_timeout_ms
            )
        except Exception:
            return None

    async def cookies(self) -> list[Cookie]:
        try:
            raw: list[Any] = await self._page.context.cookies()
        except Exception as e:
            logger.debug(f"reading cookies failed: {e}")
            return []
        return [Cookie.model_validate(dict(c)) for c in raw]

    async def disable_fido(self) -> None:
        """
        Report FIDO as unsupported in credential-type lookups so the provider
        offers password/code paths instead of a passkey ceremony.
        """

        async def _rewrite(route: Route) -> None:
            request = route.request
            try:
                post_data = request.post_data
                body = json.loads(post_data) if post_data else {}
                body["isFidoSupported"] = False
                headers = {**request.headers, "content-type": "application/json"}
                await route.continue_(post_data=json.dumps(body), headers=headers)
            except Exception as e:
                logger.debug(f"credential-type rewrite failed: {e}")
                await route.continue_()

        await self._page.route(CREDENTIAL_TYPE_ROUTE, _rewrite)
