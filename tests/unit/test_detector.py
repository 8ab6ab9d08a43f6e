from __future__ import annotations

import pytest

from loginflow import selectors as sig
from loginflow.detector import PRIORITY, StateDetector, resolve_state
from loginflow.models import Account, AuthState

from tests.unit.fakes import FakeSurface, make_context

IDENTITY = "login.live.com"


def _resolve(*states: AuthState, host: str = IDENTITY) -> AuthState:
    return resolve_state(list(states), host=host, identity_host=IDENTITY)


def test_empty_candidates_resolve_to_unknown() -> None:
    assert _resolve() is AuthState.UNKNOWN


@pytest.mark.parametrize("other", [s for s in AuthState if s is not AuthState.ACCOUNT_LOCKED])
def test_account_locked_always_wins(other: AuthState) -> None:
    assert _resolve(other, AuthState.ACCOUNT_LOCKED) is AuthState.ACCOUNT_LOCKED
    assert _resolve(AuthState.ACCOUNT_LOCKED, other) is AuthState.ACCOUNT_LOCKED


def test_error_alert_suppressed_while_totp_is_showing() -> None:
    assert _resolve(AuthState.ERROR_ALERT, AuthState.TOTP_2FA) is AuthState.TOTP_2FA


def test_error_alert_suppressed_off_identity_host() -> None:
    assert _resolve(AuthState.ERROR_ALERT, host="www.bing.com") is AuthState.UNKNOWN
    assert (
        _resolve(AuthState.ERROR_ALERT, AuthState.PASSWORD_INPUT, host="www.bing.com")
        is AuthState.PASSWORD_INPUT
    )


def test_error_alert_kept_on_identity_host() -> None:
    assert _resolve(AuthState.ERROR_ALERT, AuthState.PASSWORD_INPUT) is AuthState.ERROR_ALERT


def test_priority_order_is_applied() -> None:
    assert _resolve(AuthState.EMAIL_INPUT, AuthState.PASSWORD_INPUT) is AuthState.PASSWORD_INPUT
    assert _resolve(AuthState.PASSWORD_INPUT, AuthState.KMSI_PROMPT) is AuthState.KMSI_PROMPT
    assert _resolve(AuthState.TOTP_2FA, AuthState.OTP_CODE_ENTRY) is AuthState.OTP_CODE_ENTRY
    assert _resolve(AuthState.LOGIN_PASSWORDLESS, AuthState.GET_A_CODE) is AuthState.GET_A_CODE
    assert _resolve(AuthState.PASSKEY_ERROR, AuthState.PASSKEY_VIDEO) is AuthState.PASSKEY_VIDEO


def test_states_outside_priority_fall_back_to_first_found() -> None:
    assert AuthState.RECOVERY_EMAIL_INPUT not in PRIORITY
    assert (
        _resolve(AuthState.RECOVERY_EMAIL_INPUT, AuthState.CHROMEWEBDATA_ERROR)
        is AuthState.RECOVERY_EMAIL_INPUT
    )


@pytest.mark.asyncio
async def test_browser_error_host_short_circuits() -> None:
    surface = FakeSurface(url="chrome-error://chromewebdata/", visible={sig.ACCOUNT_LOCKED})
    detector = StateDetector(make_context(surface))

    assert await detector.detect() is AuthState.CHROMEWEBDATA_ERROR
    assert surface.probes == []


@pytest.mark.asyncio
async def test_lock_probe_short_circuits_battery() -> None:
    surface = FakeSurface(visible={sig.ACCOUNT_LOCKED, sig.PASSWORD_ENTRY})
    detector = StateDetector(make_context(surface))

    assert await detector.detect() is AuthState.ACCOUNT_LOCKED
    assert surface.probes == [sig.ACCOUNT_LOCKED]


@pytest.mark.asyncio
async def test_rewards_host_means_logged_in() -> None:
    surface = FakeSurface(url="https://rewards.bing.com/", visible={sig.PASSWORD_ENTRY})
    detector = StateDetector(make_context(surface))

    assert await detector.detect() is AuthState.LOGGED_IN


@pytest.mark.asyncio
async def test_battery_merges_selector_variants() -> None:
    surface = FakeSurface(visible={sig.EMAIL_TILE_LEGACY})
    assert await StateDetector(make_context(surface)).detect() is AuthState.SIGN_IN_ANOTHER_WAY_EMAIL

    surface = FakeSurface(visible={sig.TOTP_FORM_LEGACY})
    assert await StateDetector(make_context(surface)).detect() is AuthState.TOTP_2FA

    surface = FakeSurface(visible={sig.OTP_INPUT})
    assert await StateDetector(make_context(surface)).detect() is AuthState.OTP_CODE_ENTRY


@pytest.mark.asyncio
async def test_get_a_code_variant_depends_on_password() -> None:
    visible = {sig.IDENTITY_BANNER, sig.PRIMARY_BUTTON}

    with_password = make_context(FakeSurface(visible=visible))
    state = await StateDetector(with_password).detect(Account(email="a@b.co", password="pw"))
    assert state is AuthState.GET_A_CODE

    without_password = make_context(FakeSurface(visible=visible))
    state = await StateDetector(without_password).detect(Account(email="a@b.co"))
    assert state is AuthState.GET_A_CODE_2


@pytest.mark.asyncio
async def test_get_a_code_not_inferred_with_password_field_or_totp() -> None:
    surface = FakeSurface(visible={sig.IDENTITY_BANNER, sig.PRIMARY_BUTTON, sig.PASSWORD_ENTRY})
    assert await StateDetector(make_context(surface)).detect() is AuthState.PASSWORD_INPUT

    surface = FakeSurface(visible={sig.IDENTITY_BANNER, sig.PRIMARY_BUTTON, sig.TOTP_INPUT})
    assert await StateDetector(make_context(surface)).detect() is AuthState.TOTP_2FA


@pytest.mark.asyncio
async def test_error_alert_with_totp_is_never_fatal() -> None:
    surface = FakeSurface(visible={sig.ERROR_ALERT, sig.TOTP_INPUT})
    assert await StateDetector(make_context(surface)).detect() is AuthState.TOTP_2FA


@pytest.mark.asyncio
async def test_nothing_visible_is_unknown() -> None:
    assert await StateDetector(make_context(FakeSurface())).detect() is AuthState.UNKNOWN


@pytest.mark.asyncio
async def test_probe_errors_count_as_not_observed() -> None:
    class ExplodingSurface(FakeSurface):
        async def probe(self, signal_id: str, timeout_ms: int) -> bool:
            if signal_id == sig.ERROR_ALERT:
                raise RuntimeError("detached")
            return await super().probe(signal_id, timeout_ms)

    surface = ExplodingSurface(visible={sig.EMAIL_ENTRY})
    assert await StateDetector(make_context(surface)).detect() is AuthState.EMAIL_INPUT


@pytest.mark.asyncio
async def test_password_field_is_checked_once_per_detection() -> None:
    surface = FakeSurface(visible={sig.IDENTITY_BANNER, sig.PRIMARY_BUTTON})
    await StateDetector(make_context(surface)).detect(Account(email="a@b.co"))
    assert surface.probes.count(sig.PASSWORD_ENTRY) == 1
