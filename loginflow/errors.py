from __future__ import annotations

from typing import Optional

from .models import AuthState


class LoginError(RuntimeError):
    """Base class for failures that end a sign-in run."""

    reason_code = "login_error"

    def __init__(
        self,
        message: str,
        *,
        state: Optional[AuthState] = None,
        reason_code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.state = state
        if reason_code is not None:
            self.reason_code = reason_code


class TerminalAccountError(LoginError):
    """Account lock or provider-reported error. Never retried."""

    reason_code = "terminal_account"


class BoundedRetryExhausted(LoginError):
    reason_code = "retry_exhausted"

    def __init__(
        self,
        message: str,
        *,
        attempts: int,
        last_error: Optional[str] = None,
        state: Optional[AuthState] = None,
    ) -> None:
        super().__init__(message, state=state)
        self.attempts = attempts
        self.last_error = last_error


class TimeoutExpired(LoginError):
    reason_code = "timeout"

    def __init__(self, message: str, *, timeout_s: float, state: Optional[AuthState] = None) -> None:
        super().__init__(message, state=state)
        self.timeout_s = timeout_s


class LoopBudgetExceeded(LoginError):
    reason_code = "loop_budget_exceeded"

    def __init__(self, message: str, *, iterations: int, state: Optional[AuthState] = None) -> None:
        super().__init__(message, state=state)
        self.iterations = iterations


class LoginAborted(LoginError):
    """A handler could not make progress, or the surface went away."""

    reason_code = "aborted"
