"""
Surface backends for the sign-in state machine.

- LoginSurface: protocol the state machine consumes
- PlaywrightSurface: implementation over a Playwright ``Page``
"""

from .playwright_backend import PlaywrightSurface
from .protocol import LoginSurface, WaitPolicy

__all__ = [
    "LoginSurface",
    "PlaywrightSurface",
    "WaitPolicy",
]
