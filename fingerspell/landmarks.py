"""
Hand landmark normalization and geometry helpers.
"""
import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .types import HandFrame, HandLandmark, Landmark, NormalizedHand, Point

logger = logging.getLogger(__name__)

NUM_LANDMARKS = 21

# Canonical MediaPipe Hands landmark names, in index order
LANDMARK_NAMES: Tuple[str, ...] = (
    "wrist",
    "thumb_cmc", "thumb_mcp", "thumb_ip", "thumb_tip",
    "index_finger_mcp", "index_finger_pip", "index_finger_dip", "index_finger_tip",
    "middle_finger_mcp", "middle_finger_pip", "middle_finger_dip", "middle_finger_tip",
    "ring_finger_mcp", "ring_finger_pip", "ring_finger_dip", "ring_finger_tip",
    "pinky_finger_mcp", "pinky_finger_pip", "pinky_finger_dip", "pinky_finger_tip",
)

WRIST = 0
THUMB_MCP, THUMB_IP, THUMB_TIP = 2, 3, 4
INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20

# finger name -> (base, tip); the thumb is measured from its MCP
FINGERS = {
    "thumb": (THUMB_MCP, THUMB_TIP),
    "index": (INDEX_MCP, INDEX_TIP),
    "middle": (MIDDLE_MCP, MIDDLE_TIP),
    "ring": (RING_MCP, RING_TIP),
    "pinky": (PINKY_MCP, PINKY_TIP),
}


def _ordered(landmarks: Sequence[Landmark]) -> Optional[List[Landmark]]:
    """Put landmarks in canonical order; None if any required point is missing."""
    if len(landmarks) < NUM_LANDMARKS:
        return None

    if all(lm.name is not None for lm in landmarks):
        by_name = {lm.name: lm for lm in landmarks}
        missing = [name for name in LANDMARK_NAMES if name not in by_name]
        if missing:
            logger.warning("Hand is missing landmarks: %s", ", ".join(missing))
            return None
        ordered = [by_name[name] for name in LANDMARK_NAMES]
    else:
        ordered = list(landmarks[:NUM_LANDMARKS])

    if any(lm.x is None or lm.y is None for lm in ordered):
        return None
    return ordered


def normalize_hand(frame: HandFrame, width: int = 640, height: int = 480,
                   source_y_up: bool = False) -> Optional[NormalizedHand]:
    """
    Convert one hand's raw landmarks into unit and pixel views.

    Args:
        frame: Detected hand with 21 landmarks
        width: Reference frame width used for the pixel view
        height: Reference frame height used for the pixel view
        source_y_up: True if the estimator's y axis points up

    Returns:
        Normalized hand, or None if landmarks are missing
    """
    ordered = _ordered(frame.landmarks)
    if ordered is None:
        return None

    xy = np.array([(lm.x, lm.y) for lm in ordered], dtype=float)
    z = np.array([lm.z if lm.z is not None else 0.0 for lm in ordered], dtype=float)

    if frame.space == "world":
        # world coordinates sit roughly in [-0.5, 0.5]
        x_norm = xy[:, 0] + 0.5
        y_norm = 0.5 - xy[:, 1] if source_y_up else xy[:, 1] + 0.5
    elif frame.space == "pixel":
        x_norm = xy[:, 0] / width
        y_norm = xy[:, 1] / height
        if source_y_up:
            y_norm = 1.0 - y_norm
    else:
        x_norm = xy[:, 0]
        y_norm = 1.0 - xy[:, 1] if source_y_up else xy[:, 1]

    z_range = float(z.max() - z.min())
    z_norm = (z - z.min()) / z_range if z_range > 0 else np.zeros_like(z)

    landmarks = tuple(
        HandLandmark(
            idx=i,
            name=LANDMARK_NAMES[i],
            x_norm=float(x_norm[i]),
            y_norm=float(y_norm[i]),
            z_norm=float(z_norm[i]),
            x_px=float(x_norm[i] * width),
            y_px=float(y_norm[i] * height),
        )
        for i in range(NUM_LANDMARKS)
    )
    return NormalizedHand(landmarks=landmarks, score=frame.score, handedness=frame.handedness)


def raw_confidence(frame: HandFrame) -> float:
    """Mean per-point score if the estimator gives one, else the hand score."""
    scores = [lm.score for lm in frame.landmarks if lm.score is not None]
    if scores:
        return float(np.mean(scores))
    return float(frame.score)


# ---------- geometry (pixel view) ----------

def distance(a: Point, b: Point) -> float:
    """Euclidean distance in the image plane."""
    return math.hypot(a.x - b.x, a.y - b.y)


def direction_angle(base: Point, tip: Point) -> float:
    """
    Direction of base->tip in degrees, in [-180, 180].

    0 points right, -90 up, 90 down (screen y grows downward).
    """
    angle = math.degrees(math.atan2(tip.y - base.y, tip.x - base.x))
    while angle > 180.0:
        angle -= 360.0
    while angle < -180.0:
        angle += 360.0
    return angle


def in_band(angle: float, band: Tuple[float, float]) -> bool:
    """Open interval test."""
    low, high = band
    return low < angle < high


def is_horizontal(angle: float, tolerance: float) -> bool:
    return abs(angle) < tolerance or abs(abs(angle) - 180.0) < tolerance


def points_away_from_wrist(wrist: Point, base: Point, tip: Point) -> bool:
    """True if the tip lies beyond its base along the wrist->base axis."""
    return (tip.x - base.x) * (base.x - wrist.x) + (tip.y - base.y) * (base.y - wrist.y) > 0


def finger_states(hand: NormalizedHand, thumb_px: float, finger_px: float) -> Tuple[bool, bool, bool, bool, bool]:
    """
    Extension flags for (thumb, index, middle, ring, pinky).

    The thumb only needs its tip far enough from its base. The other fingers
    also need to point away from the wrist, which keeps the test valid when
    the hand is rotated.
    """
    wrist = hand.px(WRIST)
    flags = []
    for name, (base_idx, tip_idx) in FINGERS.items():
        base = hand.px(base_idx)
        tip = hand.px(tip_idx)
        length = distance(tip, base)
        if name == "thumb":
            flags.append(length > thumb_px)
        else:
            flags.append(length > finger_px and points_away_from_wrist(wrist, base, tip))
    return tuple(flags)
