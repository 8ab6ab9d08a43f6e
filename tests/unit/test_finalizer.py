from __future__ import annotations

import json

import pytest

from loginflow import selectors as sig
from loginflow.finalizer import SessionFinalizer
from loginflow.models import Cookie
from loginflow.session_store import JsonSessionStore

from tests.unit.fakes import FakeSurface, MockTracer, make_context


def _route(surface: FakeSurface, url: str) -> None:
    if url.startswith("https://www.bing.com/fd/auth/signin"):
        surface.url = "https://www.bing.com/"
    else:
        surface.url = url


def _surface(**kwargs) -> FakeSurface:
    surface = FakeSurface(**kwargs)
    surface.on_navigate = _route
    return surface


@pytest.mark.asyncio
async def test_finalize_scrapes_token_from_input_value() -> None:
    surface = _surface(visible={sig.SEARCH_PROFILE})
    surface.attributes[(sig.REQUEST_TOKEN, "value")] = "abcdefghijklmnop"
    surface.cookie_jar = [Cookie(name="MSPAuth", value="x", domain=".live.com")]
    tracer = MockTracer()
    ctx = make_context(surface, tracer=tracer)

    artifacts = await SessionFinalizer(ctx, clock=lambda: 1_700_000_000.0).finalize()

    assert artifacts.session_token == "abcdefghijklmnop"
    assert artifacts.email == ctx.account.email
    assert [c.name for c in artifacts.cookies] == ["MSPAuth"]
    assert surface.navigations[0] == ctx.config.base_url
    assert surface.navigations[-1] == f"{ctx.config.base_url}?_=1700000000000"
    assert tracer.events[-1]["data"] == {"cookies": 1, "has_token": True}


@pytest.mark.asyncio
async def test_token_falls_back_to_meta_tag() -> None:
    surface = _surface(visible={sig.SEARCH_PROFILE})
    surface.attributes[(sig.REQUEST_TOKEN_META, "content")] = "meta-token"

    token = await SessionFinalizer(make_context(surface)).fetch_request_token()

    assert token == "meta-token"


@pytest.mark.asyncio
async def test_missing_token_degrades_to_none() -> None:
    surface = _surface()
    ctx = make_context(surface)

    artifacts = await SessionFinalizer(ctx).finalize()

    assert artifacts.session_token is None
    assert ctx.sleep.calls.count(1.0) == 2 * ctx.config.finalizer_max_loops


@pytest.mark.asyncio
async def test_token_loop_waits_for_rewards_home() -> None:
    surface = _surface()
    surface.attributes[(sig.REQUEST_TOKEN, "value")] = "late-token"
    surface.on_navigate = None
    surface.locations = ["https://rewards.bing.com/welcome", "https://rewards.bing.com/"]

    token = await SessionFinalizer(make_context(surface)).fetch_request_token()

    assert token == "late-token"


@pytest.mark.asyncio
async def test_search_session_requires_profile_on_desktop_only() -> None:
    desktop = _surface()
    assert await SessionFinalizer(make_context(desktop)).verify_search_session() is False

    mobile = _surface()
    assert await SessionFinalizer(make_context(mobile, is_mobile=True)).verify_search_session() is True


@pytest.mark.asyncio
async def test_search_session_skips_passkey_prompt() -> None:
    surface = _surface(visible={sig.PASSKEY_ERROR, sig.SEARCH_PROFILE})

    assert await SessionFinalizer(make_context(surface)).verify_search_session() is True
    assert surface.clicks[0] == sig.SECONDARY_BUTTON


@pytest.mark.asyncio
async def test_dismiss_messages_clicks_visible_consent_buttons() -> None:
    surface = FakeSurface(visible={"consent_accept", sig.CONSENT_OVERLAY})
    surface.unclickable = {sig.CONSENT_OVERLAY_REJECT}

    dismissed = await SessionFinalizer(make_context(surface)).dismiss_messages()

    assert dismissed == 2
    assert surface.clicks == ["consent_accept", sig.CONSENT_OVERLAY_ACCEPT]


@pytest.mark.asyncio
async def test_finalize_saves_session_when_store_configured(tmp_path) -> None:
    surface = _surface(visible={sig.SEARCH_PROFILE})
    surface.cookie_jar = [Cookie.model_validate({"name": "a", "value": "1", "httpOnly": True})]
    ctx = make_context(surface, is_mobile=True)
    store = JsonSessionStore(tmp_path)

    await SessionFinalizer(ctx, session_store=store).finalize()

    saved = json.loads((tmp_path / ctx.account.email / "session_mobile.json").read_text())
    assert saved[0]["name"] == "a"
    assert saved[0]["httpOnly"] is True
