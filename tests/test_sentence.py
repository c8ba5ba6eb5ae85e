"""
Test cases for word and sentence assembly.
"""
import unittest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from fingerspell.autocorrect import Autocorrector
from fingerspell.config import AssemblerConfig
from fingerspell.sentence import SentenceBuilder
from fingerspell.types import Action, Symbol
from synthetic import FakeClock


class TestAddLetter(unittest.TestCase):
    """Test the letter guards."""

    def setUp(self):
        """Set up builder with a fake clock."""
        self.clock = FakeClock()
        self.builder = SentenceBuilder(AssemblerConfig(), Autocorrector(), self.clock)

    def test_letter_added_lowercase(self):
        result = self.builder.add_letter("H", 0)
        self.assertEqual(result.action, Action.LETTER_ADDED)
        self.assertEqual(result.current_word, "h")
        self.assertEqual(self.builder.state.last_letter, "H")

    def test_accepts_symbols(self):
        self.assertEqual(self.builder.add_letter(Symbol.Q, 0).current_word, "q")

    def test_non_letters_ignored(self):
        """Test that sentinels and odd strings leave the state alone."""
        for value in (Symbol.NONE, Symbol.UNKNOWN, Symbol.PENDING, "AB", "", "1", "é"):
            result = self.builder.add_letter(value, 0)
            self.assertEqual(result.action, Action.IGNORED)
        self.assertEqual(self.builder.state.current_word, "")

    def test_debounced_within_hold_time(self):
        """Test the same letter twice inside 1500 ms is debounced."""
        self.builder.add_letter("A", 1000)
        result = self.builder.add_letter("A", 2400)
        self.assertEqual(result.action, Action.DEBOUNCED)
        self.assertEqual(result.current_word, "a")

    def test_duplicate_blocked_after_hold_time(self):
        """Test the word's last letter is blocked between 1500 and 2000 ms."""
        self.builder.add_letter("A", 1000)
        result = self.builder.add_letter("A", 2700)
        self.assertEqual(result.action, Action.DUPLICATE_BLOCKED)

    def test_double_then_triple(self):
        """Test a held letter doubles after the window but never triples."""
        self.assertEqual(self.builder.add_letter("L", 0).action, Action.LETTER_ADDED)
        self.assertEqual(self.builder.add_letter("L", 2500).current_word, "ll")
        result = self.builder.add_letter("L", 5000)
        self.assertEqual(result.action, Action.TRIPLE_PREVENTED)
        self.assertEqual(result.current_word, "ll")

    def test_never_three_in_a_row(self):
        for i in range(10):
            self.builder.add_letter("Z", i * 3000)
        self.assertNotIn("zzz", self.builder.state.current_word)

    def test_uses_clock(self):
        self.builder.add_letter("B")
        self.clock.advance(100)
        self.assertEqual(self.builder.add_letter("B").action, Action.DEBOUNCED)
        self.assertEqual(self.builder.add_letter("C").action, Action.LETTER_ADDED)
        self.assertEqual(self.builder.state.last_letter_ms, 100)


class TestWordsAndSentence(unittest.TestCase):
    """Test space, backspace and editing."""

    def setUp(self):
        self.clock = FakeClock()
        self.builder = SentenceBuilder(AssemblerConfig(), Autocorrector(), self.clock)

    def spell(self, word: str, start: float = 0.0):
        for i, ch in enumerate(word):
            self.builder.add_letter(ch, start + i * 3000)

    def test_space_autocorrects_and_capitalises(self):
        """Test 'teh' becomes 'The' at the start of a sentence."""
        self.spell("teh")
        result = self.builder.add_space()
        self.assertEqual(result.action, Action.WORD_COMPLETED)
        self.assertEqual(result.corrected_word, "the")
        self.assertEqual(result.sentence, "The")
        self.assertEqual(result.current_word, "")
        self.assertEqual(self.builder.state.last_letter, "")

    def test_space_without_correction(self):
        self.builder.set_sentence("Hi")
        self.spell("friend")
        result = self.builder.add_space()
        self.assertIsNone(result.corrected_word)
        self.assertEqual(result.sentence, "Hi friend")

    def test_space_on_empty_word(self):
        self.builder.set_sentence("Hello")
        result = self.builder.add_space()
        self.assertEqual(result.action, Action.SPACE_IGNORED)
        self.assertEqual(result.sentence, "Hello")

    def test_backspace_letters_then_word(self):
        """Test deleting 'hel' letter by letter, then a sentence word."""
        self.builder.set_sentence("Hi there")
        self.spell("hel")
        for _ in range(3):
            self.assertEqual(self.builder.backspace().action, Action.LETTER_DELETED)
        self.assertEqual(self.builder.state.current_word, "")

        result = self.builder.backspace()
        self.assertEqual(result.action, Action.WORD_DELETED)
        self.assertEqual(result.sentence, "Hi")

    def test_space_backspace_round_trip(self):
        self.spell("hello")
        self.builder.add_space()
        result = self.builder.backspace()
        self.assertEqual(result.current_word, "hello")
        self.assertEqual(result.sentence, "")

    def test_reopened_word_has_no_triples(self):
        """Test a reopened word with a long run cannot grow a triple."""
        self.builder.set_sentence("Hi zzzz")
        result = self.builder.backspace()
        self.assertEqual(result.current_word, "zz")

        self.assertEqual(self.builder.add_letter("Z", 10000).action, Action.TRIPLE_PREVENTED)
        self.builder.add_letter("A", 12000)
        self.assertEqual(self.builder.state.current_word, "zza")
        self.assertNotIn("zzz", self.builder.get_complete_text())

    def test_backspace_without_reopen(self):
        builder = SentenceBuilder(AssemblerConfig(reopen_word_on_backspace=False), Autocorrector(), self.clock)
        builder.set_sentence("Hi there")
        result = builder.backspace()
        self.assertEqual(result.current_word, "")
        self.assertEqual(result.sentence, "Hi")

    def test_backspace_on_empty(self):
        self.assertEqual(self.builder.backspace().action, Action.BACKSPACE_IGNORED)

    def test_clear_and_clear_word(self):
        self.builder.set_sentence("Good morning")
        self.spell("fr")
        self.assertEqual(self.builder.clear_word().action, Action.WORD_CLEARED)
        self.assertEqual(self.builder.state.sentence, "Good morning")
        self.assertEqual(self.builder.state.current_word, "")

        self.spell("fr", 10000)
        result = self.builder.clear()
        self.assertEqual(result.action, Action.CLEARED)
        self.assertEqual((result.current_word, result.sentence), ("", ""))

    def test_set_sentence_collapses_spaces(self):
        self.spell("ab")
        result = self.builder.set_sentence("  see   you  ")
        self.assertEqual(result.action, Action.SENTENCE_SET)
        self.assertEqual(result.sentence, "see you")
        self.assertEqual(result.current_word, "")

    def test_get_state(self):
        """Test the state summary and that reading it changes nothing."""
        self.builder.set_sentence("Hi there")
        self.spell("yo")
        expected = {
            "current_word": "yo",
            "sentence": "Hi there",
            "word_count": 2,
            "letter_count": 2,
            "total_characters": 10,
        }
        self.assertEqual(self.builder.get_state(), expected)
        self.assertEqual(self.builder.get_state(), expected)

    def test_complete_text(self):
        self.assertEqual(self.builder.get_complete_text(), "")
        self.spell("hi")
        self.assertEqual(self.builder.get_complete_text(), "hi")
        self.builder.add_space()
        self.spell("yo", 20000)
        self.assertEqual(self.builder.get_complete_text(), "Hi yo")


if __name__ == "__main__":
    unittest.main()
