"""
Optional learned letter classifier and its arbitration with the shape rules.
"""
import logging
import pickle
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from .landmarks import NUM_LANDMARKS, normalize_hand, raw_confidence
from .shapes import ShapeClassifier
from .types import ClassificationResult, HandFrame, NormalizedHand, SecondaryClassifier, Symbol

logger = logging.getLogger(__name__)

FEATURE_SIZE = NUM_LANDMARKS * 3


def flatten_landmarks(hand: NormalizedHand) -> np.ndarray:
    """Unit-view (x, y, z) of all 21 landmarks as a flat feature vector."""
    return np.array(
        [[lm.x_norm, lm.y_norm, lm.z_norm] for lm in hand.landmarks],
        dtype=np.float32,
    ).reshape(FEATURE_SIZE)


class PickledLetterModel:
    """
    Wraps a fitted estimator exposing ``predict_proba`` and ``classes_``.

    Any scikit-learn style classifier trained on ``flatten_landmarks``
    features works; class labels are letter strings.
    """

    def __init__(self, estimator: Any):
        if not hasattr(estimator, "predict_proba"):
            raise TypeError(f"Estimator {type(estimator).__name__} has no predict_proba")
        self.estimator = estimator
        self.classes: List[Symbol] = [Symbol.parse(str(c)) for c in estimator.classes_]

    @classmethod
    def load(cls, path: str) -> "PickledLetterModel":
        model_path = Path(path)
        if not model_path.exists():
            raise FileNotFoundError(f"Model file not found: {model_path}")
        with open(model_path, "rb") as f:
            estimator = pickle.load(f)
        logger.info(f"Loaded letter model from {model_path}")
        return cls(estimator)

    def _probabilities(self, hand: NormalizedHand) -> np.ndarray:
        features = flatten_landmarks(hand).reshape(1, -1)
        return np.asarray(self.estimator.predict_proba(features))[0]

    def predict(self, hand: NormalizedHand) -> Tuple[Symbol, float]:
        probs = self._probabilities(hand)
        best = int(np.argmax(probs))
        return self.classes[best], float(probs[best])

    def top_predictions(self, hand: NormalizedHand, n: int = 3) -> List[Tuple[Symbol, float]]:
        probs = self._probabilities(hand)
        order = np.argsort(probs)[::-1][:n]
        return [(self.classes[i], float(probs[i])) for i in order]


class HybridClassifier:
    """
    Runs the shape rules and a secondary model on every hand.

    The secondary result wins only when it names a letter with confidence at
    or above the threshold; otherwise the geometric result stands.
    """

    def __init__(self, geometric: ShapeClassifier, secondary: Optional[SecondaryClassifier] = None,
                 threshold: float = 0.5):
        self.geometric = geometric
        self.secondary = secondary
        self.threshold = threshold

    def classify(self, hands: Sequence[HandFrame]) -> ClassificationResult:
        if not hands:
            return ClassificationResult(Symbol.NONE, 0.0)

        frame = hands[0]
        norm = self.geometric.normalizer
        hand = normalize_hand(frame, width=norm.frame_width, height=norm.frame_height,
                              source_y_up=norm.source_y_up)
        if hand is None:
            logger.warning("Malformed hand landmarks (%d points)", len(frame.landmarks))
            return ClassificationResult(Symbol.UNKNOWN, 0.0)

        symbol = self.geometric.classify_hand(hand)
        confidence = raw_confidence(frame)

        if self.secondary is None:
            return ClassificationResult(symbol, confidence)

        try:
            ml_symbol, ml_confidence = self.secondary.predict(hand)
        except Exception:
            logger.exception("Secondary classifier failed; using shape rules")
            return ClassificationResult(symbol, confidence)

        if ml_symbol.is_letter and ml_confidence >= self.threshold:
            if ml_symbol != symbol:
                logger.debug("Model override: %s -> %s (%.2f)", symbol.value, ml_symbol.value, ml_confidence)
            return ClassificationResult(ml_symbol, ml_confidence)
        return ClassificationResult(symbol, confidence)
