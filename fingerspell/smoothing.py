"""
Temporal smoothing of per-frame classifications.
"""
import logging
import time
from typing import Dict, FrozenSet, List, Optional

from .config import SmootherConfig
from .types import Clock, ConfidenceState, Symbol

logger = logging.getLogger(__name__)


class MonotonicClock:
    """Wall clock in milliseconds, immune to system time changes."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0


class ConfidenceSmoother:
    """
    Turns a jittery stream of symbols into stable confirmations.

    Each symbol accumulates a counter that decays while other symbols are seen.
    A symbol is confirmed once its counter reaches ``min_frames``; switching
    away from the confirmed symbol additionally waits out ``debounce_ms``
    unless both symbols belong to the same confusable group, where a stale
    counter would otherwise keep the old letter alive.
    """

    def __init__(self, cfg: Optional[SmootherConfig] = None, clock: Optional[Clock] = None):
        self.cfg = cfg or SmootherConfig()
        self.clock = clock or MonotonicClock()
        self.groups: List[FrozenSet[Symbol]] = [
            frozenset(Symbol.parse(s) for s in members)
            for members in self.cfg.confusable_groups.values()
        ]
        self.state = ConfidenceState()

    def reset(self) -> None:
        self.state = ConfidenceState()

    def same_group(self, a: Symbol, b: Symbol) -> bool:
        return any(a in group and b in group for group in self.groups)

    def update(self, symbol: Symbol, now_ms: Optional[float] = None) -> Symbol:
        """
        Feed one raw symbol and return the smoothed one.

        Args:
            symbol: Raw classifier output for this tick
            now_ms: Tick time; the clock is read when omitted

        Returns:
            The confirmed symbol, or PENDING while a new candidate builds up
        """
        t = self.clock.now_ms() if now_ms is None else now_ms
        state = self.state

        if symbol == Symbol.NONE and self.cfg.none_bypasses_debounce:
            state.counters.clear()
            if state.last_confirmed != Symbol.NONE:
                logger.debug("Hand lost, confirming none")
            state.last_confirmed = Symbol.NONE
            state.last_change_ms = t
            return Symbol.NONE

        counters: Dict[Symbol, float] = state.counters
        counters[symbol] = counters.get(symbol, 0.0) + 1.0
        for other, value in counters.items():
            if other != symbol and value > 0:
                counters[other] = max(0.0, value - self.cfg.decay)

        last = state.last_confirmed
        grouped = symbol != last and self.same_group(symbol, last)
        if grouped:
            counters[last] = 0.0

        if counters[symbol] >= self.cfg.min_frames:
            if symbol == last:
                return symbol
            elapsed = t - state.last_change_ms
            if grouped or elapsed >= self.cfg.debounce_ms:
                logger.debug("Confirmed %s (was %s, %.0f ms)", symbol.value, last.value, elapsed)
                state.last_confirmed = symbol
                state.last_change_ms = t
                return symbol
            return last

        if symbol != last:
            return Symbol.PENDING
        return last
