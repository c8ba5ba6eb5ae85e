"""
Mock event sink for testing and headless runs.
"""
import logging
from typing import List

from .types import BuilderResult, Symbol, TickEvent

logger = logging.getLogger(__name__)


class MockSink:
    """Records tick and text events and logs them instead of rendering."""

    def __init__(self, log_ticks: bool = False):
        """Initialize the mock sink."""
        self.log_ticks = log_ticks
        self.ticks: List[TickEvent] = []
        self.texts: List[BuilderResult] = []

    def on_tick(self, event: TickEvent) -> None:
        """Record a tick; only letters are logged unless log_ticks is set."""
        self.ticks.append(event)
        if self.log_ticks or event.symbol.is_letter:
            logger.info(f"[MockSink] Tick: {event.symbol.value} ({event.confidence}%) "
                        f"at {event.timestamp_ms:.0f}ms (tick #{len(self.ticks)})")

    def on_text(self, result: BuilderResult) -> None:
        """Record an assembler result."""
        self.texts.append(result)
        corrected = f" corrected={result.corrected_word!r}" if result.corrected_word else ""
        logger.info(f"[MockSink] {result.action.value}: word={result.current_word!r} "
                    f"sentence={result.sentence!r}{corrected}")

    @property
    def symbols(self) -> List[Symbol]:
        return [event.symbol for event in self.ticks]

    def reset_counters(self) -> None:
        """Forget recorded events."""
        self.ticks.clear()
        self.texts.clear()
