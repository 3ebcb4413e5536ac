from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
import chess
import asyncio
import logging
from typing import Callable, Dict, Optional

from move_confirmation import (
    format_check,
    format_checkmate,
    format_error,
    format_illegal_move,
    format_stalemate,
)
from tts import TTSConfirmation
from voice_bridge import VoiceBridge
from voice_config import VoiceConfig

logger = logging.getLogger(__name__)

WINNERS = ("white", "black")

ANNOUNCEMENTS: Dict[str, Callable[..., str]] = {
    "check": lambda request: format_check(),
    "checkmate": lambda request: format_checkmate(request.winner),
    "stalemate": lambda request: format_stalemate(),
    "illegal": lambda request: format_illegal_move(),
    "error": lambda request: format_error(request.message or "Unknown error"),
}

app = FastAPI(title="Voice Chess Moves", version="1.0.0")

voice_config = VoiceConfig.from_env()
confirmation = TTSConfirmation(voice_config)
bridge = VoiceBridge()


class ParseRequest(BaseModel):
    transcript: str
    fen: Optional[str] = None
    apply: bool = False


class ConfirmRequest(BaseModel):
    san: str


class AnnounceRequest(BaseModel):
    event: str
    winner: Optional[str] = None
    message: Optional[str] = None


class TTSRequest(BaseModel):
    text: str
    voice: Optional[str] = None


def board_from_fen(fen: Optional[str]) -> chess.Board:
    if not fen:
        return chess.Board()
    try:
        return chess.Board(fen)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid FEN: {e}")


async def create_tts_payload(text: Optional[str]) -> Optional[Dict[str, str]]:
    """Synthesize off the event loop; Piper runs as a blocking subprocess."""
    if not text or not text.strip():
        return None
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, confirmation.speak, text)


@app.get("/health")
async def health():
    return {"status": "ok", "voice_enabled": confirmation.enabled}


@app.post("/voice/parse")
async def voice_parse(payload: ParseRequest):
    """Turn a transcript into a move checked against the given position.

    Returns the parser result, whether python-chess accepted the move, the
    phrase to speak back and, when ``apply`` is set, the resulting FEN.
    """
    board = board_from_fen(payload.fen)
    outcome = bridge.process_transcript(payload.transcript, board, apply=payload.apply)

    response: Dict[str, object] = outcome.to_dict()
    response["fen"] = board.fen()
    tts_payload = await create_tts_payload(outcome.spoken)
    if tts_payload:
        response["tts"] = tts_payload
    return response


@app.post("/voice/confirm")
async def voice_confirm(payload: ConfirmRequest):
    loop = asyncio.get_running_loop()
    tts_payload = await loop.run_in_executor(None, confirmation.confirm_move, payload.san)
    return {"san": payload.san, "tts": tts_payload}


@app.post("/voice/announce")
async def voice_announce(payload: AnnounceRequest):
    formatter = ANNOUNCEMENTS.get(payload.event)
    if formatter is None:
        raise HTTPException(status_code=400, detail=f"Unknown announcement '{payload.event}'.")
    if payload.event == "checkmate" and payload.winner not in WINNERS:
        raise HTTPException(status_code=400, detail="Checkmate needs a winner: 'white' or 'black'.")
    text = formatter(payload)
    return {"event": payload.event, "text": text, "tts": await create_tts_payload(text)}


@app.post("/tts/speak")
async def tts_speak(payload: TTSRequest):
    if not payload.text.strip():
        raise HTTPException(status_code=400, detail="No text provided for TTS.")
    speaker = confirmation
    if payload.voice:
        speaker = TTSConfirmation(voice_config.updated(tts_voice=payload.voice), engine=confirmation.engine)
        speaker.set_enabled(confirmation.enabled)
    loop = asyncio.get_running_loop()
    tts_payload = await loop.run_in_executor(None, speaker.speak, payload.text)
    if not tts_payload:
        raise HTTPException(status_code=503, detail="Speech output is disabled.")
    return {"tts": tts_payload}


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=8000)
