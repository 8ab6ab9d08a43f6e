"""
Sub-flows for the individual sign-in methods.
"""

from .app_access import AppAccessLogin, build_authorize_url
from .code import CodeLogin
from .email_password import EmailPasswordLogin
from .passwordless import PasswordlessLogin
from .recovery_email import RecoveryLogin
from .totp import TotpLogin, generate_totp_code

__all__ = [
    "AppAccessLogin",
    "CodeLogin",
    "EmailPasswordLogin",
    "PasswordlessLogin",
    "RecoveryLogin",
    "TotpLogin",
    "build_authorize_url",
    "generate_totp_code",
]
