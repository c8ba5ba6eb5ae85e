"""
Test cases for handshape classification with synthetic landmarks.
"""
import unittest
import sys
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from fingerspell.config import ClassifierConfig, load_config
from fingerspell.landmarks import normalize_hand
from fingerspell.shapes import ShapeClassifier
from fingerspell.types import HandFrame, Landmark, Symbol
import synthetic


class TestShapeClassifier(unittest.TestCase):
    """Test letter rules on representative hands."""

    def setUp(self):
        """Set up classifier from the default configuration."""
        self.cfg = load_config()
        self.classifier = ShapeClassifier(self.cfg.classifier, self.cfg.normalizer)

    def letter(self, frame: HandFrame) -> Symbol:
        return self.classifier.classify([frame]).symbol

    def test_no_hand(self):
        """Test that an empty frame is NONE with zero confidence."""
        result = self.classifier.classify([])
        self.assertEqual(result.symbol, Symbol.NONE)
        self.assertEqual(result.raw_confidence, 0.0)

    def test_malformed_hand(self):
        """Test that a partial hand is UNKNOWN instead of an error."""
        frame = HandFrame(landmarks=[Landmark(x=0.5, y=0.5)] * 12)
        self.assertEqual(self.letter(frame), Symbol.UNKNOWN)

    def test_no_rule_matches(self):
        self.assertEqual(self.letter(synthetic.open_hand_thumb_out()), Symbol.UNKNOWN)

    def test_confidence_passthrough(self):
        frame = synthetic.hand_frame(synthetic.hand_points("across", True, True, True, True), score=0.42)
        self.assertAlmostEqual(self.classifier.classify([frame]).raw_confidence, 0.42)

    def test_only_first_hand_is_read(self):
        result = self.classifier.classify([synthetic.b_hand(), synthetic.y_hand()])
        self.assertEqual(result.symbol, Symbol.B)

    def test_open_palm_thumb_across_is_b(self):
        self.assertEqual(self.letter(synthetic.b_hand()), Symbol.B)

    def test_world_space_input(self):
        """Test that world coordinates reach the same letter as pixels."""
        self.assertEqual(self.letter(synthetic.to_world(synthetic.b_hand())), Symbol.B)

    def test_three_fingers_is_w(self):
        self.assertEqual(self.letter(synthetic.w_hand()), Symbol.W)

    def test_thumb_and_pinky_is_y(self):
        self.assertEqual(self.letter(synthetic.y_hand()), Symbol.Y)

    def test_thumb_and_index_is_l(self):
        self.assertEqual(self.letter(synthetic.l_hand()), Symbol.L)

    def test_fist_thumb_to_side_is_a(self):
        self.assertEqual(self.letter(synthetic.a_hand()), Symbol.A)

    def test_fingers_behind_thumb_is_e(self):
        self.assertEqual(self.letter(synthetic.e_hand()), Symbol.E)

    def test_fingers_in_front_of_thumb_is_m(self):
        """Test that depth alone separates M from E on the same 2D shape."""
        self.assertEqual(self.letter(synthetic.m_hand()), Symbol.M)

    def test_fingers_together_up_is_u(self):
        self.assertEqual(self.letter(synthetic.u_hand()), Symbol.U)

    def test_fingers_apart_is_v(self):
        self.assertEqual(self.letter(synthetic.v_hand()), Symbol.V)

    def test_fingers_together_sideways_is_h(self):
        self.assertEqual(self.letter(synthetic.h_hand()), Symbol.H)

    def test_fingers_pointing_down_is_p(self):
        self.assertEqual(self.letter(synthetic.p_hand()), Symbol.P)

    def test_fingers_level_with_thumb_in_front_is_s(self):
        self.assertEqual(self.letter(synthetic.s_hand()), Symbol.S)

    def test_thumb_under_two_fingers_is_n(self):
        self.assertEqual(self.letter(synthetic.n_hand()), Symbol.N)

    def test_closed_fist_told_apart_by_depth(self):
        """Test that the same 2D fist reads M, E, S or N depending on depth."""
        expected = {
            "m_hand": Symbol.M,
            "e_hand": Symbol.E,
            "s_hand": Symbol.S,
            "n_hand": Symbol.N,
        }
        outlines = set()
        for name, symbol in expected.items():
            frame = getattr(synthetic, name)()
            outlines.add(tuple((lm.x, lm.y) for lm in frame.landmarks))
            self.assertEqual(self.letter(frame), symbol, name)
        self.assertEqual(len(outlines), 1)

    def test_thumb_between_knuckles_is_t(self):
        self.assertEqual(self.letter(synthetic.t_hand()), Symbol.T)

    def test_half_curled_hand_is_c(self):
        self.assertEqual(self.letter(synthetic.c_hand()), Symbol.C)

    def test_thumb_touching_curled_index_is_o(self):
        self.assertEqual(self.letter(synthetic.o_hand()), Symbol.O)

    def test_thumb_index_loop_is_f(self):
        self.assertEqual(self.letter(synthetic.f_hand()), Symbol.F)

    def test_index_up_others_on_thumb_is_d(self):
        self.assertEqual(self.letter(synthetic.d_hand()), Symbol.D)

    def test_hooked_index_is_x(self):
        self.assertEqual(self.letter(synthetic.x_hand()), Symbol.X)

    def test_straight_index_alone_is_z(self):
        self.assertEqual(self.letter(synthetic.z_hand()), Symbol.Z)

    def test_sideways_index_and_thumb_is_g(self):
        self.assertEqual(self.letter(synthetic.g_hand()), Symbol.G)

    def test_downward_index_and_thumb_is_q(self):
        """Test that Q wins over L, which also matches a downward pair."""
        pose = self.classifier.pose(normalize_hand(synthetic.q_hand()))
        self.assertTrue(self.classifier._is_l(pose))
        self.assertEqual(self.letter(synthetic.q_hand()), Symbol.Q)

    def test_q_checked_before_g(self):
        """Test that Q keeps priority when the G tolerances would also accept it."""
        loose = replace(self.cfg.classifier, horizontal_tolerance_deg=95.0, g_parallel_px=100.0)
        classifier = ShapeClassifier(loose, self.cfg.normalizer)
        pose = classifier.pose(normalize_hand(synthetic.q_hand()))
        self.assertTrue(classifier._is_g(pose))
        self.assertEqual(classifier.classify([synthetic.q_hand()]).symbol, Symbol.Q)

    def test_spread_fingers_thumb_raised_is_k(self):
        self.assertEqual(self.letter(synthetic.k_hand()), Symbol.K)

    def test_p_checked_before_k(self):
        """Test that P keeps priority when the K bands also cover pointing down."""
        wide = replace(self.cfg.classifier, k_bands=[(-135.0, -10.0), (10.0, 135.0)])
        classifier = ShapeClassifier(wide, self.cfg.normalizer)
        pose = classifier.pose(normalize_hand(synthetic.p_hand()))
        self.assertTrue(classifier._is_k(pose))
        self.assertEqual(classifier.classify([synthetic.p_hand()]).symbol, Symbol.P)

    def test_crossed_fingers_are_r_before_u(self):
        """Test that crossed fingers read as R although they are also together and up."""
        pose = self.classifier.pose(normalize_hand(synthetic.r_hand()))
        self.assertTrue(self.classifier._is_u(pose))
        self.assertEqual(self.letter(synthetic.r_hand()), Symbol.R)

    def test_pinky_up_is_i(self):
        self.assertEqual(self.letter(synthetic.i_hand()), Symbol.I)

    def test_sideways_pinky_is_j_before_i(self):
        """Test that rule order gives J priority over I for a sideways pinky."""
        self.assertEqual(self.letter(synthetic.j_hand()), Symbol.J)

    def test_band_configuration(self):
        """Test that the up band is read from configuration."""
        narrow = ClassifierConfig(up_band=(-85.0, -45.0))
        classifier = ShapeClassifier(narrow, self.cfg.normalizer)
        # middle finger points at -90, outside the narrowed band
        self.assertEqual(classifier.classify([synthetic.u_hand()]).symbol, Symbol.UNKNOWN)

    def test_classify_hand_is_pure(self):
        """Test that classifying the same hand twice gives the same letter."""
        hand = normalize_hand(synthetic.w_hand())
        self.assertEqual(self.classifier.classify_hand(hand), self.classifier.classify_hand(hand))


class TestThumbPlacement(unittest.TestCase):
    """Test the thumb position predicates."""

    def setUp(self):
        self.classifier = ShapeClassifier()

    def pose(self, thumb: str):
        frame = synthetic.hand_frame(synthetic.hand_points(thumb))
        return self.classifier.pose(normalize_hand(frame))

    def test_across(self):
        pose = self.pose("across")
        self.assertTrue(self.classifier.thumb_across_palm(pose))
        self.assertFalse(self.classifier.thumb_to_side(pose))

    def test_side(self):
        pose = self.pose("a")
        self.assertTrue(self.classifier.thumb_to_side(pose))
        self.assertFalse(self.classifier.thumb_across_palm(pose))

    def test_fist_flags(self):
        pose = self.pose("tucked")
        self.assertTrue(pose.all_closed)
        self.assertFalse(pose.thumb)


if __name__ == "__main__":
    unittest.main()
