from __future__ import annotations

import pytest

from loginflow import selectors as sig
from loginflow.errors import BoundedRetryExhausted, TerminalAccountError
from loginflow.handlers import StateHandlers
from loginflow.models import Account, AuthState

from tests.unit.fakes import FakeSurface, ScriptedManualInput, make_context


def test_every_state_has_a_handler() -> None:
    handlers = StateHandlers(make_context())
    assert set(handlers.table) == set(AuthState)


@pytest.mark.asyncio
async def test_account_locked_raises_terminal_error() -> None:
    surface = FakeSurface()
    surface.texts[sig.ACCOUNT_LOCKED] = "Your account has been locked"

    with pytest.raises(TerminalAccountError) as exc_info:
        await StateHandlers(make_context(surface)).handle(AuthState.ACCOUNT_LOCKED)

    assert exc_info.value.state is AuthState.ACCOUNT_LOCKED
    assert "Your account has been locked" in str(exc_info.value)


@pytest.mark.asyncio
async def test_error_alert_raises_with_visible_message() -> None:
    surface = FakeSurface()
    surface.texts[sig.ERROR_ALERT] = "That Microsoft account doesn't exist."

    with pytest.raises(TerminalAccountError) as exc_info:
        await StateHandlers(make_context(surface)).handle(AuthState.ERROR_ALERT)

    assert exc_info.value.reason_code == "provider_error"
    assert "doesn't exist" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "state,target",
    [
        (AuthState.KMSI_PROMPT, sig.PRIMARY_BUTTON),
        (AuthState.PASSKEY_VIDEO, sig.SECONDARY_BUTTON),
        (AuthState.PASSKEY_ERROR, sig.SECONDARY_BUTTON),
        (AuthState.SIGN_IN_ANOTHER_WAY, sig.PASSWORD_TILE),
    ],
)
async def test_single_click_states(state: AuthState, target: str) -> None:
    surface = FakeSurface()
    assert await StateHandlers(make_context(surface)).handle(state) is True
    assert surface.clicks == [target]


@pytest.mark.asyncio
async def test_email_and_password_states_fill_from_account() -> None:
    surface = FakeSurface(visible={sig.EMAIL_FIELD, sig.PASSWORD_FIELD, sig.SUBMIT_BUTTON})
    account = Account(email="user@example.com", password="hunter2")
    handlers = StateHandlers(make_context(surface, account=account))

    assert await handlers.handle(AuthState.EMAIL_INPUT) is True
    assert await handlers.handle(AuthState.PASSWORD_INPUT) is True

    assert (sig.EMAIL_FIELD, "user@example.com") in surface.fills
    assert (sig.PASSWORD_FIELD, "hunter2") in surface.fills


@pytest.mark.asyncio
async def test_get_a_code_prefers_other_ways_link() -> None:
    surface = FakeSurface(visible={sig.OTHER_WAYS_TO_SIGN_IN, sig.VIEW_FOOTER, sig.BACK_BUTTON})
    assert await StateHandlers(make_context(surface)).handle(AuthState.GET_A_CODE) is True
    assert surface.clicks == [sig.OTHER_WAYS_TO_SIGN_IN]


@pytest.mark.asyncio
async def test_get_a_code_falls_back_to_footer_then_back() -> None:
    surface = FakeSurface(visible={sig.VIEW_FOOTER, sig.BACK_BUTTON})
    await StateHandlers(make_context(surface)).handle(AuthState.GET_A_CODE)
    assert surface.clicks == [sig.VIEW_FOOTER]

    surface = FakeSurface(visible={sig.BACK_BUTTON})
    await StateHandlers(make_context(surface)).handle(AuthState.GET_A_CODE)
    assert surface.clicks == [sig.BACK_BUTTON]


@pytest.mark.asyncio
async def test_get_a_code_without_exit_still_continues() -> None:
    surface = FakeSurface()
    assert await StateHandlers(make_context(surface)).handle(AuthState.GET_A_CODE) is True
    assert surface.clicks == []


@pytest.mark.asyncio
async def test_get_a_code_without_password_runs_code_flow() -> None:
    surface = FakeSurface(visible={sig.CODE_INPUT_WRAPPER})
    channel = ScriptedManualInput(["123456"])
    ctx = make_context(surface, account=Account(email="user@example.com"), manual_input=channel)

    assert await StateHandlers(ctx).handle(AuthState.GET_A_CODE_2) is True
    assert surface.clicks == [sig.PRIMARY_BUTTON]
    assert surface.typed == ["123456"]


@pytest.mark.asyncio
async def test_email_tile_uses_legacy_variant() -> None:
    surface = FakeSurface(visible={sig.EMAIL_TILE_LEGACY, sig.CODE_INPUT_WRAPPER})
    channel = ScriptedManualInput(["123456"])

    assert await StateHandlers(make_context(surface, manual_input=channel)).handle(
        AuthState.SIGN_IN_ANOTHER_WAY_EMAIL
    )
    assert surface.clicks == [sig.EMAIL_TILE_LEGACY]


@pytest.mark.asyncio
async def test_email_tile_missing_aborts() -> None:
    surface = FakeSurface()
    assert await StateHandlers(make_context(surface)).handle(AuthState.SIGN_IN_ANOTHER_WAY_EMAIL) is False
    assert surface.clicks == []


@pytest.mark.asyncio
async def test_otp_code_entry_escapes_via_footer_or_back() -> None:
    surface = FakeSurface(visible={sig.VIEW_FOOTER, sig.BACK_BUTTON})
    assert await StateHandlers(make_context(surface)).handle(AuthState.OTP_CODE_ENTRY) is True
    assert surface.clicks == [sig.VIEW_FOOTER]

    surface = FakeSurface(visible={sig.BACK_BUTTON})
    assert await StateHandlers(make_context(surface)).handle(AuthState.OTP_CODE_ENTRY) is True
    assert surface.clicks == [sig.BACK_BUTTON]

    surface = FakeSurface()
    assert await StateHandlers(make_context(surface)).handle(AuthState.OTP_CODE_ENTRY) is True


@pytest.mark.asyncio
async def test_browser_error_navigates_to_base_url() -> None:
    surface = FakeSurface(url="chrome-error://chromewebdata/")
    ctx = make_context(surface)

    assert await StateHandlers(ctx).handle(AuthState.CHROMEWEBDATA_ERROR) is True
    assert surface.navigations == [ctx.config.base_url]
    assert ctx.sleep.calls == [3.0]


@pytest.mark.asyncio
async def test_browser_error_falls_back_to_identity_root() -> None:
    surface = FakeSurface(url="chrome-error://chromewebdata/")
    ctx = make_context(surface)
    surface.failing_navigations = {ctx.config.base_url}

    assert await StateHandlers(ctx).handle(AuthState.CHROMEWEBDATA_ERROR) is True
    assert surface.navigations == [ctx.config.base_url, ctx.config.identity_root_url]


@pytest.mark.asyncio
async def test_totp_state_propagates_sub_flow_failure() -> None:
    surface = FakeSurface(visible={sig.TOTP_FIELD})
    ctx = make_context(surface, account=Account(email="user@example.com"))

    with pytest.raises(BoundedRetryExhausted):
        await StateHandlers(ctx).handle(AuthState.TOTP_2FA)


@pytest.mark.asyncio
async def test_unknown_and_logged_in_are_no_ops() -> None:
    surface = FakeSurface()
    handlers = StateHandlers(make_context(surface))

    assert await handlers.handle(AuthState.UNKNOWN) is True
    assert await handlers.handle(AuthState.LOGGED_IN) is True
    assert surface.clicks == [] and surface.navigations == []
