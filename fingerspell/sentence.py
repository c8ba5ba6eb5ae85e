"""
Word and sentence assembly from confirmed letters.
"""
import logging
from dataclasses import replace
from typing import Any, Dict, Optional, Union

from .autocorrect import Autocorrector, collapse_repeats
from .config import AssemblerConfig
from .smoothing import MonotonicClock
from .types import Action, BuilderResult, BuilderState, Clock, Symbol

logger = logging.getLogger(__name__)


def _as_letter(letter: Union[Symbol, str]) -> Optional[str]:
    """Uppercase A-Z for a single letter, None for anything else."""
    if isinstance(letter, Symbol):
        return letter.value if letter.is_letter else None
    if isinstance(letter, str) and len(letter) == 1 and letter.isascii() and letter.isalpha():
        return letter.upper()
    return None


class SentenceBuilder:
    """
    Accumulates letters into a word and words into a sentence.

    Every call returns a ``BuilderResult``. Rejected input is reported through
    the action and never raises. State changes replace the frozen
    ``BuilderState`` in one assignment.
    """

    def __init__(self, cfg: Optional[AssemblerConfig] = None,
                 autocorrector: Optional[Autocorrector] = None,
                 clock: Optional[Clock] = None):
        self.cfg = cfg or AssemblerConfig()
        self.autocorrector = autocorrector or Autocorrector()
        self.clock = clock or MonotonicClock()
        self.state = BuilderState()

    def _result(self, action: Action, corrected_word: Optional[str] = None) -> BuilderResult:
        return BuilderResult(
            current_word=self.state.current_word,
            sentence=self.state.sentence,
            action=action,
            corrected_word=corrected_word,
        )

    def add_letter(self, letter: Union[Symbol, str], now_ms: Optional[float] = None) -> BuilderResult:
        """
        Append a confirmed letter to the current word unless a guard rejects it.

        Guards, in order: same letter again within the hold time (debounced),
        same as the word's last letter within the duplicate window
        (duplicate_blocked), and a third identical letter in a row
        (triple_prevented).
        """
        upper = _as_letter(letter)
        if upper is None:
            return self._result(Action.IGNORED)

        now = self.clock.now_ms() if now_ms is None else now_ms
        state = self.state
        lower = upper.lower()
        elapsed = now - state.last_letter_ms

        if upper == state.last_letter and elapsed < self.cfg.hold_time_ms:
            logger.debug("Debounced %s (%.0f ms since last)", upper, elapsed)
            return self._result(Action.DEBOUNCED)

        if state.current_word.endswith(lower) and elapsed < self.cfg.duplicate_window_ms:
            logger.debug("Duplicate %s blocked (%.0f ms since last)", upper, elapsed)
            return self._result(Action.DUPLICATE_BLOCKED)

        if state.current_word.endswith(lower * 2):
            logger.debug("Prevented triple %s", lower)
            return self._result(Action.TRIPLE_PREVENTED)

        self.state = replace(
            state,
            current_word=state.current_word + lower,
            last_letter=upper,
            last_letter_ms=now,
        )
        logger.info(f"Added letter {upper}, current word: '{self.state.current_word}'")
        return self._result(Action.LETTER_ADDED)

    def add_space(self) -> BuilderResult:
        """Autocorrect the current word and move it into the sentence."""
        state = self.state
        word = state.current_word
        if not word:
            return self._result(Action.SPACE_IGNORED)

        corrected = self.autocorrector.correct(word)
        if state.sentence:
            sentence = f"{state.sentence} {corrected}"
        else:
            sentence = corrected[:1].upper() + corrected[1:]

        self.state = replace(state, current_word="", sentence=sentence, last_letter="")
        logger.info(f"Word completed: '{word}' -> '{corrected}', sentence: '{sentence}'")
        return self._result(Action.WORD_COMPLETED, corrected if corrected != word else None)

    def backspace(self) -> BuilderResult:
        """Delete the last letter, or the last sentence word when the word is empty."""
        state = self.state
        if state.current_word:
            self.state = replace(state, current_word=state.current_word[:-1])
            return self._result(Action.LETTER_DELETED)

        if state.sentence:
            words = state.sentence.split(" ")
            removed = words.pop()
            reopened = ""
            if self.cfg.reopen_word_on_backspace:
                reopened = collapse_repeats("".join(c for c in removed.lower() if "a" <= c <= "z"))
            self.state = replace(state, current_word=reopened, sentence=" ".join(words), last_letter="")
            logger.info(f"Removed word '{removed}', sentence: '{self.state.sentence}'")
            return self._result(Action.WORD_DELETED)

        return self._result(Action.BACKSPACE_IGNORED)

    def clear(self) -> BuilderResult:
        self.state = replace(self.state, current_word="", sentence="", last_letter="")
        logger.info("Cleared all text")
        return self._result(Action.CLEARED)

    def clear_word(self) -> BuilderResult:
        self.state = replace(self.state, current_word="", last_letter="")
        return self._result(Action.WORD_CLEARED)

    def set_sentence(self, text: str) -> BuilderResult:
        """Replace the sentence with edited text and drop the word in progress."""
        self.state = replace(self.state, current_word="", sentence=" ".join(text.split()))
        return self._result(Action.SENTENCE_SET)

    def get_state(self) -> Dict[str, Any]:
        state = self.state
        return {
            "current_word": state.current_word,
            "sentence": state.sentence,
            "word_count": len(state.sentence.split()),
            "letter_count": len(state.current_word),
            "total_characters": len(state.sentence) + len(state.current_word),
        }

    def get_complete_text(self) -> str:
        state = self.state
        if state.current_word:
            return f"{state.sentence} {state.current_word}" if state.sentence else state.current_word
        return state.sentence
