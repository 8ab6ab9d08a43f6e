"""
Sign-in orchestration.

``LoginFlow.login()`` drives the detect -> guard -> handle loop until the
rewards host is reached, then hands over to ``SessionFinalizer``.

Example:
    flow = LoginFlow(LoginConfig(), ConsoleManualInput())
    artifacts = await flow.login(PlaywrightSurface(page), account)
    token = flow.request_token
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Optional

from . import selectors as sig
from .backends.protocol import LoginSurface
from .config import LoginConfig
from .context import LoginContext, SleepFn, TraceEmitter
from .detector import StateDetector
from .errors import LoginAborted, LoginError, LoopBudgetExceeded
from .finalizer import SessionFinalizer
from .handlers import StateHandlers
from .log import get_logger
from .methods.app_access import AppAccessLogin
from .models import Account, AuthState, LoopCounters, SessionArtifacts
from .prompt import ManualInputChannel, NoManualInput
from .session_store import SessionStore
from .stagnation import StagnationGuard

ComponentFactory = Callable[[LoginContext], Any]


class LoginFlow:
    """
    Sign-in state machine for one device class.

    Instances hold no per-account state besides the last scraped request
    token; run one instance per concurrent account.
    """

    def __init__(
        self,
        config: LoginConfig | None = None,
        manual_input: ManualInputChannel | None = None,
        *,
        is_mobile: bool = False,
        session_store: Optional[SessionStore] = None,
        tracer: Optional[TraceEmitter] = None,
        sleep: SleepFn = asyncio.sleep,
        detector_factory: ComponentFactory | None = None,
        handlers_factory: ComponentFactory | None = None,
        finalizer_factory: ComponentFactory | None = None,
    ) -> None:
        self.config = config or LoginConfig()
        self.manual_input = manual_input or NoManualInput()
        self.is_mobile = is_mobile
        self.session_store = session_store
        self.tracer = tracer
        self.sleep = sleep
        self.detector_factory = detector_factory or StateDetector
        self.handlers_factory = handlers_factory or StateHandlers
        self.finalizer_factory = finalizer_factory or (
            lambda ctx: SessionFinalizer(ctx, session_store=self.session_store)
        )
        self.guard = StagnationGuard()
        self.request_token: Optional[str] = None
        self.log = get_logger(__name__, "LOGIN", is_mobile=is_mobile)

    def _context(self, surface: LoginSurface, account: Account) -> LoginContext:
        return LoginContext(
            surface=surface,
            account=account,
            config=self.config,
            manual_input=self.manual_input,
            is_mobile=self.is_mobile,
            sleep=self.sleep,
            tracer=self.tracer,
        )

    async def _enter(self, ctx: LoginContext) -> None:
        cfg = self.config
        surface = ctx.surface
        await surface.navigate(cfg.entry_url, "domcontentloaded", cfg.navigation_timeout_ms)
        await ctx.wait(cfg.entry_delay_s)

        if await ctx.probe(sig.NET_ERROR_PAGE):
            self.log.warning("network error page on entry, reloading")
            await surface.reload("domcontentloaded")
            await ctx.wait(cfg.reload_delay_s)

        if cfg.disable_fido:
            disable = getattr(surface, "disable_fido", None)
            if callable(disable):
                await disable()

    async def run(self, ctx: LoginContext) -> None:
        """The bounded state loop. Returns only once ``LOGGED_IN`` is observed."""
        cfg = self.config
        detector = self.detector_factory(ctx)
        handlers = self.handlers_factory(ctx)
        counters = LoopCounters(
            max_iterations=cfg.max_iterations, stagnation_threshold=cfg.stagnation_threshold
        )
        logged_in = False
        state = AuthState.UNKNOWN

        while counters.iteration < counters.max_iterations:
            if await ctx.surface.is_closed():
                raise LoginAborted("surface closed unexpectedly", state=state)

            counters.iteration += 1
            self.log.debug(f"state check iteration {counters.iteration}/{counters.max_iterations}")

            previous = counters.previous_state
            state = await detector.detect(ctx.account)
            self.log.debug(f"current state: {state}")
            ctx.emit("login_state", {"state": str(state), "iteration": counters.iteration})

            if state is not previous and previous is not AuthState.UNKNOWN:
                self.log.info(f"state transition: {previous} -> {state}")

            if self.guard.should_reload(state, counters):
                self.log.warning(
                    f'stuck in state "{state}" for {cfg.stagnation_threshold} repeats, reloading'
                )
                ctx.emit("login_stagnation_reload", {"state": str(state), "iteration": counters.iteration})
                await ctx.surface.reload("domcontentloaded")
                await ctx.wait(cfg.reload_delay_s)
                continue

            if state is AuthState.LOGGED_IN:
                self.log.info("sign-in successful")
                logged_in = True
                break

            if not await handlers.handle(state):
                raise LoginAborted(f"sign-in aborted in state: {state}", state=state)

            await ctx.wait(cfg.iteration_delay_s)

        if not logged_in:
            raise LoopBudgetExceeded(
                "authentication exceeded retry budget",
                iterations=counters.iteration,
                state=state,
            )

    async def login(self, surface: LoginSurface, account: Account) -> SessionArtifacts:
        self.request_token = None
        ctx = self._context(surface, account)
        try:
            self.log.info("starting sign-in")
            await self._enter(ctx)
            await self.run(ctx)

            artifacts = await self.finalizer_factory(ctx).finalize()
            self.request_token = artifacts.session_token
            return artifacts
        except LoginError as e:
            self.log.error(f"fatal error [{e.reason_code}]: {e}")
            state = str(e.state) if e.state is not None else None
            ctx.emit("login_failed", {"reason": e.reason_code, "state": state})
            raise
        except Exception as e:
            self.log.error(f"fatal error: {e}")
            raise

    async def get_app_access_token(self, surface: LoginSurface, email: str) -> str:
        """OAuth token for the mobile app API. ``""`` when it cannot be obtained."""
        ctx = self._context(surface, Account(email=email))
        return await AppAccessLogin(ctx).get(email)
