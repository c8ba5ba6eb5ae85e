"""
ASL Fingerspelling Recognition

Turns per-frame hand landmarks from a pose estimator into stable letters, and
assembles those letters into auto-corrected words and sentences.
"""

__version__ = "0.1.0"

from .types import (
    Action,
    BuilderResult,
    ClassificationResult,
    HandFrame,
    Landmark,
    NormalizedHand,
    Symbol,
    TickEvent,
    TickResult,
)
from .config import load_config, Cfg
from .landmarks import normalize_hand
from .shapes import ShapeClassifier
from .smoothing import ConfidenceSmoother
from .autocorrect import Autocorrector, levenshtein
from .sentence import SentenceBuilder
from .session import RecognitionSession, create_session
from .sink_mock import MockSink

__all__ = [
    "Action",
    "BuilderResult",
    "ClassificationResult",
    "HandFrame",
    "Landmark",
    "NormalizedHand",
    "Symbol",
    "TickEvent",
    "TickResult",
    "load_config",
    "Cfg",
    "normalize_hand",
    "ShapeClassifier",
    "ConfidenceSmoother",
    "Autocorrector",
    "levenshtein",
    "SentenceBuilder",
    "RecognitionSession",
    "create_session",
    "MockSink",
]
