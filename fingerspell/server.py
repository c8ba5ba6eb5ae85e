#!/usr/bin/env python3
"""
Fingerspelling Recognition - FastAPI Server
Per-session landmark ingestion, letter confirmation and sentence editing
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import List, Literal, Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from . import __version__
from .config import Cfg, load_config
from .session import RecognitionSession, create_session
from .types import BuilderResult, Clock, HandFrame, Landmark

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


# Request/Response models
class LandmarkModel(BaseModel):
    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None
    name: Optional[str] = None
    score: Optional[float] = None


class HandModel(BaseModel):
    landmarks: List[LandmarkModel]
    score: float = 0.0
    handedness: Optional[str] = None
    space: Literal["world", "image", "pixel"] = "world"

    def to_frame(self) -> HandFrame:
        return HandFrame(
            landmarks=[Landmark(**lm.model_dump()) for lm in self.landmarks],
            score=self.score,
            handedness=self.handedness,
            space=self.space,
        )


class FrameRequest(BaseModel):
    hands: List[HandModel] = Field(default_factory=list)
    timestamp_ms: Optional[float] = None


class LetterRequest(BaseModel):
    letter: str = Field(..., pattern=r"^[A-Za-z]$")
    timestamp_ms: Optional[float] = None


class SentenceRequest(BaseModel):
    text: str


class TextResponse(BaseModel):
    current_word: str
    sentence: str
    action: str
    corrected_word: Optional[str] = None


class TickResponse(BaseModel):
    symbol: str
    confidence: int
    timestamp_ms: float
    text: Optional[TextResponse] = None


class SessionResponse(BaseModel):
    session_id: str


class StateResponse(BaseModel):
    current_word: str
    sentence: str
    word_count: int
    letter_count: int
    total_characters: int
    complete_text: str


class StatusResponse(BaseModel):
    status: str
    version: str
    sessions: int


def _text(result: BuilderResult) -> TextResponse:
    return TextResponse(
        current_word=result.current_word,
        sentence=result.sentence,
        action=result.action.value,
        corrected_word=result.corrected_word,
    )


def create_app(cfg: Optional[Cfg] = None, clock: Optional[Clock] = None) -> FastAPI:
    """
    Build the service with an empty session registry.

    Args:
        cfg: Configuration shared by every new session
        clock: Time source for new sessions (tests inject a fake one)
    """
    cfg = cfg or Cfg()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Starting fingerspelling server...")
        yield
        logger.info("🧹 Shutting down server...")
        for session in list(app.state.sessions.values()):
            await session.stop_detection_loop()
        app.state.sessions.clear()

    app = FastAPI(title="Fingerspelling Recognition API", version=__version__, lifespan=lifespan)
    app.state.cfg = cfg
    app.state.clock = clock
    app.state.sessions = {}

    def get_session(request: Request, session_id: str) -> RecognitionSession:
        session = request.app.state.sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
        return session

    @app.get("/status", response_model=StatusResponse)
    async def status(request: Request):
        return StatusResponse(status="ok", version=__version__, sessions=len(request.app.state.sessions))

    @app.post("/sessions", response_model=SessionResponse, status_code=201)
    async def open_session(request: Request):
        session = create_session(request.app.state.cfg, clock=request.app.state.clock)
        request.app.state.sessions[session.session_id] = session
        logger.info(f"✅ Session {session.session_id} created")
        return SessionResponse(session_id=session.session_id)

    @app.delete("/sessions/{session_id}", status_code=204)
    async def close_session(session_id: str, request: Request):
        session = get_session(request, session_id)
        await session.stop_detection_loop()
        del request.app.state.sessions[session_id]
        logger.info(f"Session {session_id} closed")

    @app.post("/sessions/{session_id}/frames", response_model=TickResponse)
    async def post_frame(session_id: str, frame: FrameRequest, request: Request):
        session = get_session(request, session_id)
        tick = session.process_frame([hand.to_frame() for hand in frame.hands], frame.timestamp_ms)
        return TickResponse(
            symbol=tick.event.symbol.value,
            confidence=tick.event.confidence,
            timestamp_ms=tick.event.timestamp_ms,
            text=_text(tick.text) if tick.text is not None else None,
        )

    @app.post("/sessions/{session_id}/letters", response_model=TextResponse)
    async def post_letter(session_id: str, body: LetterRequest, request: Request):
        session = get_session(request, session_id)
        return _text(session.add_letter(body.letter, body.timestamp_ms))

    @app.post("/sessions/{session_id}/space", response_model=TextResponse)
    async def post_space(session_id: str, request: Request):
        return _text(get_session(request, session_id).add_space())

    @app.post("/sessions/{session_id}/backspace", response_model=TextResponse)
    async def post_backspace(session_id: str, request: Request):
        return _text(get_session(request, session_id).backspace())

    @app.post("/sessions/{session_id}/clear", response_model=TextResponse)
    async def post_clear(session_id: str, request: Request):
        return _text(get_session(request, session_id).clear())

    @app.post("/sessions/{session_id}/clear-word", response_model=TextResponse)
    async def post_clear_word(session_id: str, request: Request):
        return _text(get_session(request, session_id).clear_word())

    @app.get("/sessions/{session_id}/state", response_model=StateResponse)
    async def get_state(session_id: str, request: Request):
        session = get_session(request, session_id)
        return StateResponse(**session.get_state(), complete_text=session.get_complete_text())

    @app.put("/sessions/{session_id}/sentence", response_model=TextResponse)
    async def put_sentence(session_id: str, body: SentenceRequest, request: Request):
        return _text(get_session(request, session_id).set_sentence(body.text))

    return app


def main():
    """Run the server with uvicorn."""
    logging.basicConfig(level=logging.INFO)

    cfg = load_config(os.getenv("FINGERSPELL_CONFIG"))
    host = os.getenv("FINGERSPELL_HOST", cfg.server.host)
    port = int(os.getenv("FINGERSPELL_PORT", cfg.server.port))

    logger.info(f"🌐 Serving on http://{host}:{port}")
    uvicorn.run(create_app(cfg), host=host, port=port)


if __name__ == "__main__":
    main()
