"""
Camera application for fingerspelling recognition.
"""
import argparse
import asyncio
import logging
from typing import Optional

import cv2

from .config import load_config
from .session import create_session
from .sink_mock import MockSink
from .tracker import CameraSource, HandsTracker
from .types import TickResult

logger = logging.getLogger(__name__)


class FingerspellApp:
    """Main application class for fingerspelling recognition."""

    def __init__(self, config_path: Optional[str] = None, headless: bool = False):
        """Initialize the application with configuration."""
        self.config = load_config(config_path)
        self.headless = headless
        self.sink = MockSink()
        self.session = create_session(self.config, sink=self.sink)
        self.source = CameraSource(self.config.camera, HandsTracker(self.config.mediapipe))

    async def run(self):
        """Run the main application loop."""
        logger.info(f"🚀 Starting {self.config.display.window_name} "
                    f"(session {self.session.session_id})")
        try:
            if self.headless:
                await self.run_headless()
            else:
                await self.run_interactive()
        finally:
            self.source.release()
            if not self.headless:
                cv2.destroyAllWindows()
        logger.info(f"📄 Final text: '{self.session.get_complete_text()}'")

    async def run_headless(self):
        """Tick on the detection loop and log events until interrupted."""
        logger.info("🤖 Headless mode, press Ctrl+C to stop")
        await self.session.start_detection_loop(self.source)
        try:
            while self.session.running:
                await asyncio.sleep(1.0)
        finally:
            await self.session.stop_detection_loop()

    async def run_interactive(self):
        """Show the camera feed with an overlay and keyboard controls."""
        logger.info("🎯 Fingerspelling recognition:")
        logger.info("  - SPACE = finish word, b = backspace")
        logger.info("  - c = clear all, w = clear word, q = quit")

        interval = self.config.detection.interval_ms
        last_tick_ms = None
        tick: Optional[TickResult] = None

        while True:
            frame, hands = self.source.read_frame()
            if frame is None:
                break

            now = self.session.clock.now_ms()
            if last_tick_ms is None or now - last_tick_ms >= interval:
                tick = self.session.process_frame(hands, now)
                last_tick_ms = now

            if hands and self.config.display.show_landmarks:
                frame = self.source.tracker.draw_landmarks(frame)
            self.draw_overlay(frame, tick)
            cv2.imshow(self.config.display.window_name, frame)

            key = cv2.waitKey(1) & 0xFF
            if key == ord('q'):
                break
            if key == ord(' '):
                self.session.add_space()
            elif key == ord('b'):
                self.session.backspace()
            elif key == ord('c'):
                self.session.clear()
                self.sink.reset_counters()
            elif key == ord('w'):
                self.session.clear_word()

            # let other tasks run between frames
            await asyncio.sleep(0)

    def draw_overlay(self, frame, tick: Optional[TickResult]):
        state = self.session.get_state()
        if tick is None:
            status = "Waiting for first tick"
        elif tick.event.symbol.is_letter:
            status = f"Letter: {tick.event.symbol.value} ({tick.event.confidence}%)"
        else:
            status = f"Status: {tick.event.symbol.value}"

        color = (0, 255, 0) if tick is not None and tick.event.symbol.is_letter else (0, 0, 255)
        cv2.putText(frame, status, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2)
        raw = self.session.last_classification
        if raw is not None:
            cv2.putText(frame, f"Raw: {raw.symbol.value}", (frame.shape[1] - 160, 30),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 255), 1)
        cv2.putText(frame, f"Word: {state['current_word']}", (10, 60),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 1)
        cv2.putText(frame, f"Sentence: {state['sentence']}", (10, 90),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 1)
        cv2.putText(frame, "SPACE word | b back | c clear | w clear word | q quit",
                    (10, frame.shape[0] - 20), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)
        return frame


def main():
    """Entry point for the application."""
    parser = argparse.ArgumentParser(description="ASL fingerspelling recognition from a camera")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--headless", action="store_true", help="Run without a window, logging events")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    try:
        app = FingerspellApp(config_path=args.config, headless=args.headless)
        asyncio.run(app.run())
    except KeyboardInterrupt:
        logger.info("\nApplication interrupted by user")


if __name__ == "__main__":
    main()
