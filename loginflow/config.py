from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LoginConfig:
    """
    Knobs for one sign-in run.

    Hosts and URLs describe the identity provider and the rewards application;
    budgets and timings bound every loop so the flow always terminates.
    """

    # Application / provider locations
    base_url: str = "https://rewards.bing.com/"
    entry_url: str = "https://www.bing.com/rewards/dashboard"
    identity_host: str = "login.live.com"
    identity_root_url: str = "https://login.live.com/"
    success_hosts: tuple[str, ...] = ("rewards.bing.com", "account.microsoft.com")
    rewards_host: str = "rewards.bing.com"
    browser_error_host: str = "chromewebdata"
    search_signin_url: str = (
        "https://www.bing.com/fd/auth/signin?action=interactive"
        "&provider=windows_live_id&return_url=https%3A%2F%2Fwww.bing.com%2F"
    )
    search_home_host: str = "www.bing.com"
    approval_path: str = "/ppsecure/post.srf"

    # Budgets
    max_iterations: int = 25
    stagnation_threshold: int = 4
    max_attempts: int = 5
    manual_timeout_seconds: int = 60
    passwordless_max_polls: int = 60
    finalizer_max_loops: int = 5

    # Timings
    probe_timeout_ms: int = 200
    settle_timeout_ms: int = 5_000
    navigation_timeout_ms: int = 10_000
    iteration_delay_s: float = 1.0
    reload_delay_s: float = 3.0
    entry_delay_s: float = 2.0

    # Ask the surface to report FIDO as unsupported to the provider.
    disable_fido: bool = True

    def __post_init__(self) -> None:
        for name in (
            "max_iterations",
            "stagnation_threshold",
            "max_attempts",
            "manual_timeout_seconds",
            "passwordless_max_polls",
            "finalizer_max_loops",
            "probe_timeout_ms",
            "settle_timeout_ms",
            "navigation_timeout_ms",
        ):
            if int(getattr(self, name)) <= 0:
                raise ValueError(f"{name} must be positive")
        for name in ("iteration_delay_s", "reload_delay_s", "entry_delay_s"):
            if float(getattr(self, name)) < 0:
                raise ValueError(f"{name} must not be negative")
        if not self.identity_host:
            raise ValueError("identity_host is required")
