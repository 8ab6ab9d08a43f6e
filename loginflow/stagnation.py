from __future__ import annotations

from .models import AuthState, LoopCounters


class StagnationGuard:
    """
    Detects a state machine that keeps landing on the same screen.

    Repeats of a non-success, non-unknown state are counted; once the count
    reaches the threshold the caller must reload, and tracking starts over.
    """

    def should_reload(self, state: AuthState, counters: LoopCounters) -> bool:
        if (
            state == counters.previous_state
            and state is not AuthState.LOGGED_IN
            and state is not AuthState.UNKNOWN
        ):
            counters.stagnation_count += 1
            if counters.stagnation_count >= counters.stagnation_threshold:
                counters.stagnation_count = 0
                counters.previous_state = AuthState.UNKNOWN
                return True
            return False

        counters.stagnation_count = 0
        counters.previous_state = state
        return False
