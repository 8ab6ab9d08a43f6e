"""
loginflow: sign-in state machine for an identity provider with many screens.
"""

from .backends import LoginSurface, PlaywrightSurface
from .config import LoginConfig
from .context import LoginContext
from .detector import PRIORITY, StateDetector, resolve_state
from .errors import (
    BoundedRetryExhausted,
    LoginAborted,
    LoginError,
    LoopBudgetExceeded,
    TerminalAccountError,
    TimeoutExpired,
)
from .finalizer import SessionFinalizer
from .handlers import StateHandlers
from .login import LoginFlow
from .models import Account, AuthState, Cookie, Location, LoopCounters, SessionArtifacts, SubFlowAttempt
from .prompt import (
    ConsoleManualInput,
    ManualInputChannel,
    ManualPromptRequest,
    NoManualInput,
    is_email_address,
    is_six_digit_code,
)
from .session_store import JsonSessionStore, SessionStore
from .stagnation import StagnationGuard

__version__ = "0.1.0"

__all__ = [
    "Account",
    "AuthState",
    "BoundedRetryExhausted",
    "ConsoleManualInput",
    "Cookie",
    "JsonSessionStore",
    "Location",
    "LoginAborted",
    "LoginConfig",
    "LoginContext",
    "LoginError",
    "LoginFlow",
    "LoginSurface",
    "LoopBudgetExceeded",
    "LoopCounters",
    "ManualInputChannel",
    "ManualPromptRequest",
    "NoManualInput",
    "PRIORITY",
    "PlaywrightSurface",
    "SessionArtifacts",
    "SessionFinalizer",
    "SessionStore",
    "StagnationGuard",
    "StateDetector",
    "StateHandlers",
    "SubFlowAttempt",
    "TerminalAccountError",
    "TimeoutExpired",
    "is_email_address",
    "is_six_digit_code",
    "resolve_state",
]
