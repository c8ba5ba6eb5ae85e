"""
MediaPipe Hands adapter and OpenCV camera source.
"""
import asyncio
import logging
from typing import List, Optional, Tuple

import cv2
import mediapipe as mp
import numpy as np

from .config import CameraConfig, MediaPipeConfig
from .landmarks import LANDMARK_NAMES
from .types import HandFrame, Landmark

logger = logging.getLogger(__name__)


class HandsTracker:
    """Hand landmark tracker using MediaPipe Hands."""

    def __init__(self, cfg: Optional[MediaPipeConfig] = None):
        """
        Initialize the hands tracker.

        Args:
            cfg: Hand count, detection/tracking confidence and landmark space
        """
        self.cfg = cfg or MediaPipeConfig()
        self.mp_hands = mp.solutions.hands
        self.hands = self.mp_hands.Hands(
            static_image_mode=False,
            max_num_hands=self.cfg.max_num_hands,
            min_detection_confidence=self.cfg.min_detection_confidence,
            min_tracking_confidence=self.cfg.min_tracking_confidence,
        )
        self.mp_drawing = mp.solutions.drawing_utils
        self.last_results = None

    def process(self, frame_bgr: np.ndarray) -> List[HandFrame]:
        """
        Detect hands in a frame.

        Args:
            frame_bgr: Input frame in BGR format

        Returns:
            One HandFrame per detected hand, empty if none
        """
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        results = self.hands.process(frame_rgb)
        self.last_results = results

        if not results.multi_hand_landmarks:
            return []

        use_world = self.cfg.use_world_landmarks and results.multi_hand_world_landmarks
        hand_sets = results.multi_hand_world_landmarks if use_world else results.multi_hand_landmarks
        handedness = results.multi_handedness or []

        frames = []
        for i, hand_landmarks in enumerate(hand_sets):
            label, score = self._handedness(handedness, i)
            landmarks = [
                Landmark(x=lm.x, y=lm.y, z=lm.z, name=LANDMARK_NAMES[j])
                for j, lm in enumerate(hand_landmarks.landmark)
            ]
            frames.append(HandFrame(
                landmarks=landmarks,
                score=score,
                handedness=label,
                space="world" if use_world else "image",
            ))
        return frames

    @staticmethod
    def _handedness(handedness, i: int) -> Tuple[Optional[str], float]:
        if i >= len(handedness):
            return None, 0.0
        category = handedness[i].classification[0]
        return category.label, float(category.score)

    def draw_landmarks(self, frame: np.ndarray) -> np.ndarray:
        """Draw the hands found by the last ``process`` call onto the frame."""
        if self.last_results is None or not self.last_results.multi_hand_landmarks:
            return frame
        for hand_landmarks in self.last_results.multi_hand_landmarks:
            self.mp_drawing.draw_landmarks(frame, hand_landmarks, self.mp_hands.HAND_CONNECTIONS)
        return frame

    def close(self) -> None:
        self.hands.close()


class CameraSource:
    """
    Landmark source reading frames from an OpenCV camera.

    Blocking capture and inference run in a worker thread so the detection
    loop never stalls the event loop.
    """

    def __init__(self, camera: Optional[CameraConfig] = None, tracker: Optional[HandsTracker] = None):
        self.camera = camera or CameraConfig()
        self.tracker = tracker or HandsTracker()
        self.last_frame: Optional[np.ndarray] = None

        self.cap = cv2.VideoCapture(self.camera.index)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.camera.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.camera.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.camera.fps)

        if not self.cap.isOpened():
            raise RuntimeError(f"Failed to open camera {self.camera.index}")

    def read_frame(self) -> Tuple[Optional[np.ndarray], List[HandFrame]]:
        """Grab one frame and detect hands in it; (None, []) if the read fails."""
        ret, frame = self.cap.read()
        if not ret:
            logger.warning("Failed to read frame from camera")
            return None, []
        self.last_frame = frame
        return frame, self.tracker.process(frame)

    async def read_hands(self) -> List[HandFrame]:
        _, hands = await asyncio.to_thread(self.read_frame)
        return hands

    def release(self) -> None:
        if self.cap.isOpened():
            self.cap.release()
        self.tracker.close()
