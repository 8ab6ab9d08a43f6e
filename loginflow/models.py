"""
Pydantic models and loop bookkeeping for the sign-in state machine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel, ConfigDict, Field


class AuthState(str, Enum):
    """Closed set of stages the identity provider can present."""

    EMAIL_INPUT = "EMAIL_INPUT"
    PASSWORD_INPUT = "PASSWORD_INPUT"
    SIGN_IN_ANOTHER_WAY = "SIGN_IN_ANOTHER_WAY"
    SIGN_IN_ANOTHER_WAY_EMAIL = "SIGN_IN_ANOTHER_WAY_EMAIL"
    PASSKEY_ERROR = "PASSKEY_ERROR"
    PASSKEY_VIDEO = "PASSKEY_VIDEO"
    KMSI_PROMPT = "KMSI_PROMPT"
    LOGGED_IN = "LOGGED_IN"
    RECOVERY_EMAIL_INPUT = "RECOVERY_EMAIL_INPUT"
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
    ERROR_ALERT = "ERROR_ALERT"
    TOTP_2FA = "2FA_TOTP"
    LOGIN_PASSWORDLESS = "LOGIN_PASSWORDLESS"
    GET_A_CODE = "GET_A_CODE"
    GET_A_CODE_2 = "GET_A_CODE_2"
    OTP_CODE_ENTRY = "OTP_CODE_ENTRY"
    UNKNOWN = "UNKNOWN"
    CHROMEWEBDATA_ERROR = "CHROMEWEBDATA_ERROR"

    @property
    def is_terminal_success(self) -> bool:
        return self is AuthState.LOGGED_IN

    def __str__(self) -> str:
        return self.value


class Account(BaseModel):
    """Identity and credential bundle for one sign-in run."""

    model_config = ConfigDict(frozen=True)

    email: str
    password: Optional[str] = None
    totp_secret: Optional[str] = None
    recovery_email: Optional[str] = None


class Location(BaseModel):
    """Coarse location of the surface (host/path split out of the URL)."""

    url: str = ""
    host: str = ""
    path: str = ""
    query: dict[str, list[str]] = Field(default_factory=dict)

    @classmethod
    def from_url(cls, url: str) -> "Location":
        try:
            parsed = urlparse(url or "")
        except ValueError:
            return cls(url=url or "")
        return cls(
            url=url or "",
            host=(parsed.hostname or "").lower(),
            path=parsed.path or "",
            query=parse_qs(parsed.query),
        )

    def query_value(self, key: str) -> str | None:
        values = self.query.get(key) or []
        return values[0] if values else None


class Cookie(BaseModel):
    """Browser cookie, accepting Playwright's camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    value: str
    domain: str = ""
    path: str = "/"
    expires: float = -1
    http_only: bool = Field(False, alias="httpOnly")
    secure: bool = False
    same_site: Optional[str] = Field(None, alias="sameSite")


class SessionArtifacts(BaseModel):
    """Persistable result of a confirmed sign-in."""

    email: str
    is_mobile: bool = False
    cookies: list[Cookie] = Field(default_factory=list)
    session_token: Optional[str] = None


@dataclass
class LoopCounters:
    iteration: int = 0
    max_iterations: int = 25
    previous_state: AuthState = AuthState.UNKNOWN
    stagnation_count: int = 0
    stagnation_threshold: int = 4


@dataclass
class SubFlowAttempt:
    """Attempt bookkeeping scoped to one sub-flow invocation."""

    attempt_number: int = 0
    max_attempts: int = 5
    last_error: str | None = None

    @property
    def exhausted(self) -> bool:
        return self.attempt_number >= self.max_attempts

    def describe(self) -> str:
        return f"attempt {self.attempt_number}/{self.max_attempts}"
