"""
Per-session wiring of the recognition pipeline and its detection loop.
"""
import asyncio
import logging
import uuid
from typing import Any, Dict, Optional, Sequence, Union

from .autocorrect import Autocorrector
from .config import Cfg
from .model import HybridClassifier, PickledLetterModel
from .sentence import SentenceBuilder
from .shapes import ShapeClassifier
from .smoothing import ConfidenceSmoother, MonotonicClock
from .types import (
    Action,
    BuilderResult,
    ClassificationResult,
    Clock,
    EventSink,
    HandFrame,
    LandmarkSource,
    Symbol,
    TickEvent,
    TickResult,
)

logger = logging.getLogger(__name__)


class RecognitionSession:
    """
    One user's pipeline: classifier, smoother and sentence builder.

    Nothing is shared between sessions. ``process_frame`` is synchronous, so a
    tick is applied completely or not at all when the detection loop is
    cancelled.
    """

    def __init__(self, classifier: Union[ShapeClassifier, HybridClassifier],
                 smoother: ConfidenceSmoother, builder: SentenceBuilder, clock: Clock,
                 sink: Optional[EventSink] = None, interval_ms: float = 500.0,
                 session_id: Optional[str] = None):
        self.session_id = session_id or uuid.uuid4().hex
        self.classifier = classifier
        self.smoother = smoother
        self.builder = builder
        self.clock = clock
        self.sink = sink
        self.interval_ms = interval_ms
        self.last_classification: Optional[ClassificationResult] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def process_frame(self, hands: Sequence[HandFrame], now_ms: Optional[float] = None) -> TickResult:
        """
        Run one detection tick.

        Args:
            hands: Hands detected in the frame
            now_ms: Tick time; the session clock is read when omitted

        Returns:
            The tick event, plus the builder result when a letter was fed
        """
        now = self.clock.now_ms() if now_ms is None else now_ms
        result = self.classifier.classify(hands)
        self.last_classification = result
        symbol = self.smoother.update(result.symbol, now)

        confidence = max(0, min(100, int(round(result.raw_confidence * 100))))
        event = TickEvent(symbol=symbol, confidence=confidence, timestamp_ms=now)

        text = None
        if symbol.is_letter:
            text = self.builder.add_letter(symbol, now)

        if self.sink is not None:
            self.sink.on_tick(event)
            if text is not None and text.action == Action.LETTER_ADDED:
                self.sink.on_text(text)
        return TickResult(event=event, text=text)

    async def start_detection_loop(self, source: LandmarkSource) -> None:
        """Start ticking every ``interval_ms`` on the running event loop."""
        if self.running:
            raise RuntimeError(f"Detection loop already running for session {self.session_id}")
        self._task = asyncio.create_task(self._detect(source))
        logger.info(f"Detection loop started for session {self.session_id}")

    async def stop_detection_loop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info(f"Detection loop stopped for session {self.session_id}")

    async def _detect(self, source: LandmarkSource) -> None:
        interval = self.interval_ms / 1000.0
        while True:
            hands = await source.read_hands()
            self.process_frame(hands)
            await asyncio.sleep(interval)

    # ---------- control surface ----------

    def _emit(self, result: BuilderResult) -> BuilderResult:
        if self.sink is not None:
            self.sink.on_text(result)
        return result

    def add_letter(self, letter: Union[Symbol, str], now_ms: Optional[float] = None) -> BuilderResult:
        return self._emit(self.builder.add_letter(letter, now_ms))

    def add_space(self) -> BuilderResult:
        return self._emit(self.builder.add_space())

    def backspace(self) -> BuilderResult:
        return self._emit(self.builder.backspace())

    def clear(self) -> BuilderResult:
        return self._emit(self.builder.clear())

    def clear_word(self) -> BuilderResult:
        return self._emit(self.builder.clear_word())

    def set_sentence(self, text: str) -> BuilderResult:
        return self._emit(self.builder.set_sentence(text))

    def get_state(self) -> Dict[str, Any]:
        return self.builder.get_state()

    def get_complete_text(self) -> str:
        return self.builder.get_complete_text()


def create_session(cfg: Optional[Cfg] = None, clock: Optional[Clock] = None,
                   sink: Optional[EventSink] = None,
                   classifier: Optional[Union[ShapeClassifier, HybridClassifier]] = None,
                   session_id: Optional[str] = None) -> RecognitionSession:
    """
    Build a session with its own isolated state.

    Args:
        cfg: Configuration; dataclass defaults when omitted
        clock: Time source shared by the smoother and the builder
        sink: Receiver of tick and text events
        classifier: Prebuilt classifier; built from ``cfg`` when omitted

    Returns:
        A ready session with an idle detection loop
    """
    cfg = cfg or Cfg()
    clock = clock or MonotonicClock()

    if classifier is None:
        classifier = ShapeClassifier(cfg.classifier, cfg.normalizer)
        if cfg.ml.enabled:
            if not cfg.ml.model_path:
                raise ValueError("ml.enabled requires ml.model_path")
            classifier = HybridClassifier(
                classifier,
                PickledLetterModel.load(cfg.ml.model_path),
                threshold=cfg.ml.confidence_threshold,
            )

    return RecognitionSession(
        classifier=classifier,
        smoother=ConfidenceSmoother(cfg.smoother, clock),
        builder=SentenceBuilder(cfg.assembler, Autocorrector.from_config(cfg.autocorrect), clock),
        clock=clock,
        sink=sink,
        interval_ms=cfg.detection.interval_ms,
        session_id=session_id,
    )
