"""
Static ASL handshape classification from hand landmark geometry.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .config import ClassifierConfig, NormalizerConfig
from .landmarks import (
    INDEX_DIP, INDEX_MCP, INDEX_PIP, INDEX_TIP,
    MIDDLE_MCP, MIDDLE_TIP,
    PINKY_MCP, PINKY_TIP,
    RING_MCP, RING_TIP,
    THUMB_MCP, THUMB_TIP,
    WRIST,
    direction_angle,
    distance,
    finger_states,
    in_band,
    is_horizontal,
    normalize_hand,
    raw_confidence,
)
from .types import ClassificationResult, HandFrame, NormalizedHand, Point, Symbol

logger = logging.getLogger(__name__)

FINGER_TIPS = (INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP)
FINGER_BASES = (INDEX_MCP, MIDDLE_MCP, RING_MCP, PINKY_MCP)


@dataclass(frozen=True)
class HandPose:
    """A normalized hand plus its finger extension flags."""
    hand: NormalizedHand
    thumb: bool
    index: bool
    middle: bool
    ring: bool
    pinky: bool

    def p(self, idx: int) -> Point:
        return self.hand.px(idx)

    @property
    def all_closed(self) -> bool:
        return not (self.index or self.middle or self.ring or self.pinky)

    @property
    def index_middle_only(self) -> bool:
        return self.index and self.middle and not self.ring and not self.pinky

    @property
    def index_thumb_only(self) -> bool:
        return self.thumb and self.index and not self.middle and not self.ring and not self.pinky

    @property
    def pinky_only(self) -> bool:
        return self.pinky and not self.index and not self.middle and not self.ring


Rule = Tuple[Symbol, Callable[[HandPose], bool]]


class ShapeClassifier:
    """
    Maps one hand to a letter with an ordered list of geometric rules.

    Rules are evaluated top to bottom and the first match wins, so the order
    encodes which of two similar shapes takes priority. The classifier is
    stateless; temporal smoothing happens downstream.
    """

    def __init__(self, cfg: Optional[ClassifierConfig] = None,
                 normalizer: Optional[NormalizerConfig] = None):
        self.cfg = cfg or ClassifierConfig()
        self.normalizer = normalizer or NormalizerConfig()

        self.rules: List[Rule] = [
            # closed fist, told apart by the thumb
            (Symbol.A, self._is_a),
            (Symbol.M, self._is_m),
            (Symbol.E, self._is_e),
            (Symbol.S, self._is_s),
            (Symbol.A, self._is_a_fallback),
            (Symbol.D, self._is_d),
            (Symbol.B, self._is_b),
            (Symbol.F, self._is_f),
            (Symbol.H, self._is_h),
            (Symbol.Q, self._is_q),
            (Symbol.G, self._is_g),
            (Symbol.P, self._is_p),
            (Symbol.K, self._is_k),
            (Symbol.J, self._is_j),
            (Symbol.I, self._is_i),
            (Symbol.L, self._is_l),
            (Symbol.N, self._is_n),
            (Symbol.C, self._is_c),
            (Symbol.O, self._is_o),
            (Symbol.R, self._is_r),
            (Symbol.T, self._is_t),
            (Symbol.U, self._is_u),
            (Symbol.V, self._is_v),
            (Symbol.W, self._is_w),
            (Symbol.X, self._is_x),
            (Symbol.Y, self._is_y),
            (Symbol.Z, self._is_z),
        ]

    def classify(self, hands: Sequence[HandFrame]) -> ClassificationResult:
        """
        Classify the first hand of a frame.

        Args:
            hands: Hands detected in the frame (only the first is used)

        Returns:
            NONE without a hand, UNKNOWN for malformed landmarks or no match
        """
        if not hands:
            return ClassificationResult(Symbol.NONE, 0.0)

        frame = hands[0]
        hand = normalize_hand(
            frame,
            width=self.normalizer.frame_width,
            height=self.normalizer.frame_height,
            source_y_up=self.normalizer.source_y_up,
        )
        if hand is None:
            logger.warning("Malformed hand landmarks (%d points)", len(frame.landmarks))
            return ClassificationResult(Symbol.UNKNOWN, 0.0)

        return ClassificationResult(self.classify_hand(hand), raw_confidence(frame))

    def classify_hand(self, hand: NormalizedHand) -> Symbol:
        pose = self.pose(hand)
        logger.debug(
            "Finger states: thumb=%s index=%s middle=%s ring=%s pinky=%s",
            pose.thumb, pose.index, pose.middle, pose.ring, pose.pinky,
        )
        for symbol, rule in self.rules:
            if rule(pose):
                logger.debug("Classified as %s", symbol.value)
                return symbol
        return Symbol.UNKNOWN

    def pose(self, hand: NormalizedHand) -> HandPose:
        thumb, index, middle, ring, pinky = finger_states(
            hand, self.cfg.thumb_extended_px, self.cfg.finger_extended_px
        )
        return HandPose(hand, thumb, index, middle, ring, pinky)

    # ---------- thumb placement ----------

    def thumb_across_palm(self, pose: HandPose) -> bool:
        """Thumb tip near the wrist line and level with the knuckles."""
        tip = pose.p(THUMB_TIP)
        knuckle_y = (pose.p(INDEX_MCP).y + pose.p(MIDDLE_MCP).y) / 2
        return (abs(tip.x - pose.p(WRIST).x) < self.cfg.thumb_across_x_px
                and abs(tip.y - knuckle_y) < self.cfg.thumb_across_y_px)

    def thumb_to_side(self, pose: HandPose) -> bool:
        tip = pose.p(THUMB_TIP)
        return (abs(tip.x - pose.p(INDEX_MCP).x) > self.cfg.thumb_side_x_px
                and abs(tip.x - pose.p(WRIST).x) > self.cfg.thumb_side_extension_px)

    def thumb_in_front(self, pose: HandPose) -> bool:
        """Thumb tip closer to the camera than the index knuckle, wrapped in."""
        tip = pose.p(THUMB_TIP)
        z_diff = pose.p(INDEX_MCP).z - tip.z
        return (z_diff > self.cfg.thumb_front_z
                and abs(tip.x - pose.p(WRIST).x) < self.cfg.thumb_front_x_px)

    def _tip_distances_to_thumb(self, pose: HandPose, tips: Sequence[int]) -> List[float]:
        thumb = pose.p(THUMB_TIP)
        return [distance(pose.p(t), thumb) for t in tips]

    def _together(self, pose: HandPose) -> bool:
        return distance(pose.p(INDEX_TIP), pose.p(MIDDLE_TIP)) < self.cfg.together_px

    def _angle(self, pose: HandPose, base: int, tip: int) -> float:
        return direction_angle(pose.p(base), pose.p(tip))

    # ---------- closed fist: A, M, E, S ----------

    def _is_a(self, pose: HandPose) -> bool:
        return pose.all_closed and self.thumb_to_side(pose) and not self.thumb_across_palm(pose)

    def _is_m(self, pose: HandPose) -> bool:
        # three fingertips draped over the thumb, in front of it
        if not pose.all_closed:
            return False
        tips = (INDEX_TIP, MIDDLE_TIP, RING_TIP)
        dists = self._tip_distances_to_thumb(pose, tips)
        thumb_z = pose.p(THUMB_TIP).z
        in_front = sum(1 for t in tips if pose.p(t).z < thumb_z - self.cfg.depth_margin_z)
        return (sum(dists) / len(dists) < self.cfg.m_avg_px
                and min(dists) < self.cfg.m_min_px
                and in_front >= 2)

    def _is_e(self, pose: HandPose) -> bool:
        # fingers curled back behind the thumb, thumb across the palm
        if not pose.all_closed or not self.thumb_across_palm(pose):
            return False
        thumb_z = pose.p(THUMB_TIP).z
        behind = sum(1 for t in FINGER_TIPS if pose.p(t).z > thumb_z + self.cfg.depth_margin_z)
        clear_of_thumb = min(self._tip_distances_to_thumb(pose, FINGER_TIPS)) > self.cfg.e_min_px
        return behind >= 3 or clear_of_thumb

    def _is_s(self, pose: HandPose) -> bool:
        return pose.all_closed and self.thumb_in_front(pose)

    def _is_a_fallback(self, pose: HandPose) -> bool:
        return pose.all_closed and self.thumb_to_side(pose)

    # ---------- index/middle pairs and friends ----------

    def _is_d(self, pose: HandPose) -> bool:
        # index up, the other three bunched and touching the thumb
        if not (pose.index and not pose.middle and not pose.ring and not pose.pinky):
            return False
        bunched = (distance(pose.p(MIDDLE_TIP), pose.p(RING_TIP)) < self.cfg.d_bunch_px
                   and distance(pose.p(RING_TIP), pose.p(PINKY_TIP)) < self.cfg.d_bunch_px)
        touching = min(self._tip_distances_to_thumb(pose, (MIDDLE_TIP, RING_TIP, PINKY_TIP))) < self.cfg.d_thumb_px
        return bunched and touching

    def _is_b(self, pose: HandPose) -> bool:
        return (pose.index and pose.middle and pose.ring and pose.pinky
                and self.thumb_across_palm(pose))

    def _is_f(self, pose: HandPose) -> bool:
        # thumb closes a loop with the index, the other three stand up
        if not (pose.middle and pose.ring and pose.pinky and not pose.index):
            return False
        thumb = pose.p(THUMB_TIP)
        touch = min(distance(thumb, pose.p(j)) for j in (INDEX_TIP, INDEX_DIP, INDEX_PIP, INDEX_MCP))
        wrist = pose.p(WRIST)
        reach = sum(distance(pose.p(t), wrist) for t in (MIDDLE_TIP, RING_TIP, PINKY_TIP)) / 3
        return touch < self.cfg.f_touch_px and reach > self.cfg.f_extension_px

    def _is_h(self, pose: HandPose) -> bool:
        if not pose.index_middle_only or not self._together(pose):
            return False
        tol = self.cfg.horizontal_tolerance_deg
        return (is_horizontal(self._angle(pose, INDEX_MCP, INDEX_TIP), tol)
                and is_horizontal(self._angle(pose, MIDDLE_MCP, MIDDLE_TIP), tol))

    def _is_q(self, pose: HandPose) -> bool:
        # G turned upside down
        if not pose.index_thumb_only:
            return False
        wrist_y = pose.p(WRIST).y
        return (in_band(self._angle(pose, INDEX_MCP, INDEX_TIP), self.cfg.down_band)
                and in_band(self._angle(pose, THUMB_MCP, THUMB_TIP), self.cfg.thumb_down_band)
                and pose.p(INDEX_TIP).y > wrist_y
                and pose.p(THUMB_TIP).y > wrist_y)

    def _is_g(self, pose: HandPose) -> bool:
        if not pose.index_thumb_only:
            return False
        parallel = abs(pose.p(INDEX_TIP).y - pose.p(THUMB_TIP).y) < self.cfg.g_parallel_px
        return parallel and is_horizontal(self._angle(pose, INDEX_MCP, INDEX_TIP),
                                          self.cfg.horizontal_tolerance_deg)

    def _is_p(self, pose: HandPose) -> bool:
        # K turned to point down; checked before K
        if not pose.index_middle_only:
            return False
        wrist_y = pose.p(WRIST).y
        return (in_band(self._angle(pose, INDEX_MCP, INDEX_TIP), self.cfg.down_band)
                and in_band(self._angle(pose, MIDDLE_MCP, MIDDLE_TIP), self.cfg.down_band)
                and pose.p(INDEX_TIP).y > wrist_y
                and pose.p(MIDDLE_TIP).y > wrist_y)

    def _is_k(self, pose: HandPose) -> bool:
        if not pose.index_middle_only:
            return False
        spread = abs(pose.p(INDEX_TIP).x - pose.p(MIDDLE_TIP).x)
        if not self.cfg.k_spread_min_px < spread < self.cfg.k_spread_max_px:
            return False
        angles = (self._angle(pose, INDEX_MCP, INDEX_TIP), self._angle(pose, MIDDLE_MCP, MIDDLE_TIP))
        pointing_up = all(any(in_band(a, band) for band in self.cfg.k_bands) for a in angles)
        # thumb raised between the two fingers, above the knuckles
        thumb_raised = pose.p(THUMB_TIP).y < min(pose.p(INDEX_MCP).y, pose.p(MIDDLE_MCP).y)
        return pointing_up and thumb_raised

    def _is_j(self, pose: HandPose) -> bool:
        # final pose of the J stroke: pinky swung out sideways
        return pose.pinky_only and is_horizontal(self._angle(pose, PINKY_MCP, PINKY_TIP),
                                                 self.cfg.horizontal_tolerance_deg)

    def _is_i(self, pose: HandPose) -> bool:
        return pose.pinky_only and self.thumb_across_palm(pose)

    def _is_l(self, pose: HandPose) -> bool:
        if not pose.index_thumb_only:
            return False
        wrist = pose.p(WRIST)
        return (abs(pose.p(INDEX_TIP).y - wrist.y) > self.cfg.l_index_rise_px
                and abs(pose.p(THUMB_TIP).x - wrist.x) > self.cfg.l_thumb_out_px)

    def _is_n(self, pose: HandPose) -> bool:
        # two fingertips over the thumb at about its depth
        if not pose.all_closed:
            return False
        tips = (INDEX_TIP, MIDDLE_TIP)
        dists = self._tip_distances_to_thumb(pose, tips)
        thumb_z = pose.p(THUMB_TIP).z
        level = sum(1 for t in tips if abs(pose.p(t).z - thumb_z) < self.cfg.n_depth_z)
        return (sum(dists) / len(dists) < self.cfg.n_avg_px
                and min(dists) < self.cfg.n_min_px
                and level >= 1)

    # ---------- circular shapes ----------

    def _is_c(self, pose: HandPose) -> bool:
        curls = [distance(pose.p(t), pose.p(b)) for t, b in zip(FINGER_TIPS, FINGER_BASES)]
        curved = all(self.cfg.c_curl_min_px < c < self.cfg.c_curl_max_px for c in curls)
        to_thumb = self._tip_distances_to_thumb(pose, FINGER_TIPS)
        return curved and sum(to_thumb) / len(to_thumb) > self.cfg.c_thumb_clear_px

    def _is_o(self, pose: HandPose) -> bool:
        return distance(pose.p(THUMB_TIP), pose.p(INDEX_TIP)) < self.cfg.o_touch_px

    # ---------- point tests ----------

    def _is_r(self, pose: HandPose) -> bool:
        if not pose.index_middle_only:
            return False
        tip_dx = pose.p(INDEX_TIP).x - pose.p(MIDDLE_TIP).x
        base_dx = pose.p(INDEX_MCP).x - pose.p(MIDDLE_MCP).x
        crossed = tip_dx * base_dx < 0
        return crossed or abs(tip_dx) < self.cfg.r_crossed_gap_px

    def _is_t(self, pose: HandPose) -> bool:
        # thumb tucked between the index and middle knuckles
        if not pose.all_closed:
            return False
        x = pose.p(THUMB_TIP).x
        a, b = pose.p(INDEX_MCP).x, pose.p(MIDDLE_MCP).x
        return min(a, b) < x < max(a, b)

    def _is_u(self, pose: HandPose) -> bool:
        if not pose.index_middle_only or not self._together(pose):
            return False
        return (in_band(self._angle(pose, INDEX_MCP, INDEX_TIP), self.cfg.up_band)
                and in_band(self._angle(pose, MIDDLE_MCP, MIDDLE_TIP), self.cfg.up_band))

    def _is_v(self, pose: HandPose) -> bool:
        return pose.index_middle_only and not self._together(pose)

    def _is_w(self, pose: HandPose) -> bool:
        return pose.index and pose.middle and pose.ring and not pose.pinky and not pose.thumb

    def _is_x(self, pose: HandPose) -> bool:
        # index hooked: tip pulled back towards the middle joint
        if not (pose.index and not pose.middle and not pose.ring and not pose.pinky):
            return False
        tip_to_mid = distance(pose.p(INDEX_TIP), pose.p(INDEX_PIP))
        mid_to_base = distance(pose.p(INDEX_PIP), pose.p(INDEX_MCP))
        return tip_to_mid < mid_to_base * self.cfg.x_bend_ratio

    def _is_y(self, pose: HandPose) -> bool:
        return pose.thumb and pose.pinky and not pose.index and not pose.middle and not pose.ring

    def _is_z(self, pose: HandPose) -> bool:
        # static approximation: index pointing, nothing else out
        return pose.index and not pose.thumb and not pose.middle and not pose.ring and not pose.pinky
