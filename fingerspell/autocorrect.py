"""
Dictionary, pattern and edit-distance correction of completed words.
"""
import logging
import math
import re
from typing import Iterable, Mapping, Optional, Tuple

from .config import AutocorrectConfig
from .dictionary import DEFAULT_CORRECTIONS, DEFAULT_VOCABULARY, load_dictionary

logger = logging.getLogger(__name__)

# letter pairs that similar handshapes tend to swap
SWAPS: Tuple[Tuple[str, str], ...] = (
    ("ei", "ie"),
    ("mn", "nm"),
    ("nm", "mn"),
)

_REPEATS = re.compile(r"(.)\1{2,}")


def collapse_repeats(word: str) -> str:
    """Shorten every run of three or more identical characters to two."""
    return _REPEATS.sub(r"\1\1", word)


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit cost insert, delete and substitute."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


class Autocorrector:
    """
    Corrects a finished word in four passes.

    1. exact hit in the correction table
    2. already a known word
    3. collapse letter runs and try known letter swaps
    4. closest correction key or word by edit distance
    """

    def __init__(self, corrections: Optional[Mapping[str, str]] = None,
                 vocabulary: Optional[Iterable[str]] = None,
                 max_edit_ratio: float = 0.4, min_fuzzy_length: int = 3):
        self.corrections = dict(DEFAULT_CORRECTIONS if corrections is None else corrections)
        self.vocabulary = frozenset(DEFAULT_VOCABULARY if vocabulary is None else vocabulary)
        self.max_edit_ratio = max_edit_ratio
        self.min_fuzzy_length = min_fuzzy_length

        # fixed scan order so ties always resolve the same way
        self._keys = sorted(self.corrections)
        self._words = sorted(self.vocabulary)

    @classmethod
    def from_config(cls, cfg: Optional[AutocorrectConfig] = None) -> "Autocorrector":
        cfg = cfg or AutocorrectConfig()
        corrections = dict(DEFAULT_CORRECTIONS)
        vocabulary = set(DEFAULT_VOCABULARY)
        if cfg.dictionary_path:
            extra_corrections, extra_words = load_dictionary(cfg.dictionary_path)
            corrections.update(extra_corrections)
            vocabulary.update(extra_words)
            logger.info(f"Loaded {len(extra_corrections)} corrections and {len(extra_words)} words "
                        f"from {cfg.dictionary_path}")
        return cls(corrections, vocabulary, cfg.max_edit_ratio, cfg.min_fuzzy_length)

    def correct(self, word: str) -> str:
        lower = word.lower()

        if lower in self.corrections:
            logger.debug("Table correction: %s -> %s", lower, self.corrections[lower])
            return self.corrections[lower]

        if lower in self.vocabulary:
            return lower

        simple = self.simple_correct(lower)
        if simple != lower:
            logger.debug("Pattern correction: %s -> %s", lower, simple)
            return simple

        closest = self.find_closest_word(lower)
        if closest is not None and closest != lower:
            logger.debug("Fuzzy correction: %s -> %s", lower, closest)
            return closest

        return lower

    def simple_correct(self, word: str) -> str:
        """Collapse runs of 3+ letters to 2, then try swaps that yield a known word."""
        collapsed = collapse_repeats(word)
        for wrong, right in SWAPS:
            if wrong in collapsed:
                candidate = collapsed.replace(wrong, right, 1)
                if candidate in self.vocabulary:
                    return candidate
        return collapsed

    def find_closest_word(self, word: str) -> Optional[str]:
        if len(word) < self.min_fuzzy_length:
            return None

        max_distance = math.ceil(len(word) * self.max_edit_ratio)
        best: Optional[str] = None
        best_distance = max_distance + 1

        for key in self._keys:
            d = levenshtein(word, key)
            if d < best_distance:
                best, best_distance = self.corrections[key], d

        for candidate in self._words:
            d = levenshtein(word, candidate)
            if d < best_distance:
                best, best_distance = candidate, d

        return best
