"""
Type definitions for the fingerspelling recognition pipeline.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Literal, NamedTuple, Optional, Protocol, Sequence, Tuple, runtime_checkable


class Symbol(str, Enum):
    """A recognised handshape: one of the 26 letters, or a sentinel."""
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"
    G = "G"
    H = "H"
    I = "I"
    J = "J"
    K = "K"
    L = "L"
    M = "M"
    N = "N"
    O = "O"
    P = "P"
    Q = "Q"
    R = "R"
    S = "S"
    T = "T"
    U = "U"
    V = "V"
    W = "W"
    X = "X"
    Y = "Y"
    Z = "Z"
    NONE = "none"  # no hand in the frame
    UNKNOWN = "unknown"  # hand present, no shape matched
    PENDING = "pending"  # new candidate still accumulating confidence

    @property
    def is_letter(self) -> bool:
        return len(self.value) == 1

    @classmethod
    def parse(cls, text: str) -> "Symbol":
        """
        Parse a letter or sentinel name, case-insensitively.

        Raises:
            ValueError: if the text names no symbol
        """
        value = text.strip()
        if len(value) == 1:
            value = value.upper()
        else:
            value = value.lower()
        return cls(value)


LETTERS: Tuple[Symbol, ...] = tuple(s for s in Symbol if s.is_letter)


class Action(str, Enum):
    """Outcome tag of a sentence assembler call."""
    LETTER_ADDED = "letter_added"
    DUPLICATE_BLOCKED = "duplicate_blocked"
    DEBOUNCED = "debounced"
    TRIPLE_PREVENTED = "triple_prevented"
    IGNORED = "ignored"
    SPACE_IGNORED = "space_ignored"
    WORD_COMPLETED = "word_completed"
    LETTER_DELETED = "letter_deleted"
    WORD_DELETED = "word_deleted"
    BACKSPACE_IGNORED = "backspace_ignored"
    CLEARED = "cleared"
    WORD_CLEARED = "word_cleared"
    SENTENCE_SET = "sentence_set"


CoordinateSpace = Literal["world", "image", "pixel"]


@dataclass(frozen=True)
class Landmark:
    """Raw landmark as delivered by the hand-pose estimator."""
    x: Optional[float]
    y: Optional[float]
    z: Optional[float] = None  # None for 2D-only estimators
    name: Optional[str] = None
    score: Optional[float] = None


@dataclass(frozen=True)
class HandFrame:
    """One detected hand in one video frame."""
    landmarks: Sequence[Landmark]
    score: float = 0.0
    handedness: Optional[str] = None  # "Left" / "Right"
    space: CoordinateSpace = "world"


class Point(NamedTuple):
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class HandLandmark:
    """A single hand landmark with both unit and pixel coordinates."""
    idx: int
    name: str
    x_norm: float
    y_norm: float
    z_norm: float
    x_px: float
    y_px: float


@dataclass(frozen=True)
class NormalizedHand:
    """The 21 landmarks of one hand in unit and pixel views."""
    landmarks: Tuple[HandLandmark, ...]
    score: float = 0.0
    handedness: Optional[str] = None

    def px(self, idx: int) -> Point:
        """Pixel-view point; z stays unitless."""
        lm = self.landmarks[idx]
        return Point(lm.x_px, lm.y_px, lm.z_norm)

    def unit(self, idx: int) -> Point:
        lm = self.landmarks[idx]
        return Point(lm.x_norm, lm.y_norm, lm.z_norm)


@dataclass(frozen=True)
class ClassificationResult:
    """Raw per-frame classification, before smoothing."""
    symbol: Symbol
    raw_confidence: float  # 0..1


@dataclass
class ConfidenceState:
    """Persistent smoothing state of one session."""
    counters: Dict[Symbol, float] = field(default_factory=dict)
    last_confirmed: Symbol = Symbol.NONE
    last_change_ms: float = 0.0


@dataclass(frozen=True)
class BuilderState:
    """Word and sentence buffers plus the last accepted letter."""
    current_word: str = ""
    sentence: str = ""
    last_letter: str = ""
    last_letter_ms: float = 0.0


@dataclass(frozen=True)
class BuilderResult:
    """Result of every sentence assembler call."""
    current_word: str
    sentence: str
    action: Action
    corrected_word: Optional[str] = None


@dataclass(frozen=True)
class TickEvent:
    """Per-tick output of the detection pipeline."""
    symbol: Symbol
    confidence: int  # 0..100
    timestamp_ms: float


@dataclass(frozen=True)
class TickResult:
    event: TickEvent
    text: Optional[BuilderResult] = None


@runtime_checkable
class Clock(Protocol):
    """Time source in milliseconds."""

    def now_ms(self) -> float:
        ...


@runtime_checkable
class LandmarkSource(Protocol):
    """Upstream hand-pose estimator feeding the detection loop."""

    async def read_hands(self) -> List[HandFrame]:
        """Return the hands detected in the next frame (possibly none)."""
        ...


@runtime_checkable
class SecondaryClassifier(Protocol):
    """Optional learned classifier running alongside the shape rules."""

    def predict(self, hand: NormalizedHand) -> Tuple[Symbol, float]:
        ...


@runtime_checkable
class EventSink(Protocol):
    """Abstract protocol for the presentation layer consuming results."""

    def on_tick(self, event: TickEvent) -> None:
        ...

    def on_text(self, result: BuilderResult) -> None:
        ...
