"""
Example: sign in one account with a visible Chromium window.

Credentials come from the environment; anything missing (password, TOTP
secret, recovery email) is asked for on the console when the provider needs it.

Usage:
  LOGIN_EMAIL=me@example.com LOGIN_PASSWORD=... python examples/login_minimal.py
"""

import asyncio
import logging
import os

from playwright.async_api import async_playwright

from loginflow import Account, ConsoleManualInput, JsonSessionStore, LoginConfig, LoginFlow
from loginflow.backends import PlaywrightSurface


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    account = Account(
        email=os.environ["LOGIN_EMAIL"],
        password=os.environ.get("LOGIN_PASSWORD"),
        totp_secret=os.environ.get("LOGIN_TOTP_SECRET"),
        recovery_email=os.environ.get("LOGIN_RECOVERY_EMAIL"),
    )

    flow = LoginFlow(
        LoginConfig(),
        ConsoleManualInput(),
        session_store=JsonSessionStore("sessions"),
    )

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=False)
        context = await browser.new_context()
        page = await context.new_page()

        artifacts = await flow.login(PlaywrightSurface(page), account)
        print(f"signed in with {len(artifacts.cookies)} cookies")
        print(f"request token present: {flow.request_token is not None}")

        await browser.close()


if __name__ == "__main__":
    asyncio.run(main())
