"""
Test cases for the secondary letter model and hybrid arbitration.
"""
import os
import pickle
import tempfile
import unittest
import sys
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from fingerspell.landmarks import normalize_hand
from fingerspell.model import FEATURE_SIZE, HybridClassifier, PickledLetterModel, flatten_landmarks
from fingerspell.shapes import ShapeClassifier
from fingerspell.types import Symbol
import synthetic


class FixedEstimator:
    """Stands in for a fitted scikit-learn classifier."""

    def __init__(self, classes, probs):
        self.classes_ = np.array(classes)
        self.probs = np.array([probs])

    def predict_proba(self, features):
        assert features.shape == (1, FEATURE_SIZE)
        return self.probs


class FixedModel:
    def __init__(self, symbol, confidence):
        self.result = (symbol, confidence)

    def predict(self, hand):
        return self.result


class BrokenModel:
    def predict(self, hand):
        raise RuntimeError("model exploded")


class TestPickledLetterModel(unittest.TestCase):
    """Test the estimator wrapper."""

    def setUp(self):
        self.hand = normalize_hand(synthetic.b_hand())
        self.model = PickledLetterModel(FixedEstimator(["A", "b", "C"], [0.1, 0.7, 0.2]))

    def test_flatten_landmarks(self):
        features = flatten_landmarks(self.hand)
        self.assertEqual(features.shape, (FEATURE_SIZE,))
        self.assertAlmostEqual(float(features[0]), 0.5)

    def test_predict(self):
        symbol, confidence = self.model.predict(self.hand)
        self.assertEqual(symbol, Symbol.B)
        self.assertAlmostEqual(confidence, 0.7)

    def test_top_predictions(self):
        top = self.model.top_predictions(self.hand, 2)
        self.assertEqual([s for s, _ in top], [Symbol.B, Symbol.C])

    def test_rejects_estimator_without_probabilities(self):
        with self.assertRaises(TypeError):
            PickledLetterModel(object())

    def test_load(self):
        fd, path = tempfile.mkstemp(suffix=".pkl")
        with os.fdopen(fd, "wb") as f:
            pickle.dump(FixedEstimator(["A", "B"], [0.9, 0.1]), f)
        self.addCleanup(os.unlink, path)

        model = PickledLetterModel.load(path)
        self.assertEqual(model.predict(self.hand)[0], Symbol.A)

    def test_load_missing(self):
        with self.assertRaises(FileNotFoundError):
            PickledLetterModel.load("/nonexistent/model.pkl")


class TestHybridClassifier(unittest.TestCase):
    """Test arbitration between the shape rules and the model."""

    def setUp(self):
        self.shapes = ShapeClassifier()
        self.frames = [synthetic.b_hand()]

    def test_confident_model_overrides(self):
        hybrid = HybridClassifier(self.shapes, FixedModel(Symbol.F, 0.8), threshold=0.5)
        result = hybrid.classify(self.frames)
        self.assertEqual(result.symbol, Symbol.F)
        self.assertAlmostEqual(result.raw_confidence, 0.8)

    def test_unsure_model_ignored(self):
        hybrid = HybridClassifier(self.shapes, FixedModel(Symbol.F, 0.3), threshold=0.5)
        self.assertEqual(hybrid.classify(self.frames).symbol, Symbol.B)

    def test_model_sentinel_ignored(self):
        hybrid = HybridClassifier(self.shapes, FixedModel(Symbol.UNKNOWN, 0.99), threshold=0.5)
        self.assertEqual(hybrid.classify(self.frames).symbol, Symbol.B)

    def test_failing_model_falls_back(self):
        hybrid = HybridClassifier(self.shapes, BrokenModel())
        with self.assertLogs("fingerspell.model", level="ERROR"):
            result = hybrid.classify(self.frames)
        self.assertEqual(result.symbol, Symbol.B)

    def test_no_hand(self):
        hybrid = HybridClassifier(self.shapes, BrokenModel())
        self.assertEqual(hybrid.classify([]).symbol, Symbol.NONE)


if __name__ == "__main__":
    unittest.main()
