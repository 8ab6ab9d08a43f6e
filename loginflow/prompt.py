"""
Manual-input channel used when no stored secret can satisfy a challenge.
"""

from __future__ import annotations

import asyncio
import re
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional, Protocol

_SIX_DIGITS = re.compile(r"[0-9]{6}")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_six_digit_code(value: str) -> bool:
    return bool(_SIX_DIGITS.fullmatch(value or ""))


def is_email_address(value: str) -> bool:
    return bool(_EMAIL.match(value or ""))


class ManualInputChannel(Protocol):
    async def prompt(self, question: str, timeout_seconds: int) -> Optional[str]:
        """Ask a human; ``None`` when nothing arrives before the timeout."""
        ...


@dataclass(frozen=True)
class ManualPromptRequest:
    question: str
    timeout_seconds: int = 60
    validator: Callable[[str], bool] = lambda _value: True


async def request_manual_input(
    channel: ManualInputChannel, request: ManualPromptRequest
) -> Optional[str]:
    """Issue one prompt; return the stripped answer only if it validates."""
    answer = await channel.prompt(request.question, request.timeout_seconds)
    if answer is None:
        return None
    answer = answer.strip()
    if not answer or not request.validator(answer):
        return None
    return answer


class ConsoleManualInput:
    """
    Reads answers from stdin, bounded by the prompt timeout.

    A single background reader owns stdin for the lifetime of the channel and
    hands lines over through a queue, so a prompt that times out leaves no
    blocked reader behind to swallow the next answer.
    """

    def __init__(self, input_fn: Callable[[str], str] = input) -> None:
        self._input_fn = input_fn
        self._lines: Optional[asyncio.Queue[Optional[str]]] = None
        self._eof = False

    def _start_reader(self) -> asyncio.Queue[Optional[str]]:
        loop = asyncio.get_running_loop()
        lines: asyncio.Queue[Optional[str]] = asyncio.Queue()

        def _read() -> None:
            while True:
                try:
                    line: Optional[str] = self._input_fn("")
                except EOFError:
                    self._eof = True
                    line = None
                try:
                    loop.call_soon_threadsafe(lines.put_nowait, line)
                except RuntimeError:
                    # event loop already closed
                    return
                if line is None:
                    return

        threading.Thread(target=_read, name="loginflow-stdin", daemon=True).start()
        return lines

    async def prompt(self, question: str, timeout_seconds: int) -> Optional[str]:
        if self._eof:
            return None
        if self._lines is None:
            self._lines = self._start_reader()

        # Lines typed after an earlier prompt timed out belong to that prompt.
        while not self._lines.empty():
            self._lines.get_nowait()
        if self._eof:
            return None

        print(question, end="", flush=True)
        try:
            return await asyncio.wait_for(self._lines.get(), timeout=float(timeout_seconds))
        except asyncio.TimeoutError:
            return None


class NoManualInput:
    """Channel for unattended runs: every prompt resolves to no input."""

    async def prompt(self, question: str, timeout_seconds: int) -> Optional[str]:
        _ = question, timeout_seconds
        return None
