"""Tests for the HTTP endpoints, with Piper replaced by a mock engine."""

from unittest.mock import MagicMock

import chess
import pytest
from fastapi.testclient import TestClient

import main
from tts import PiperTTS, TTSConfirmation
from voice_config import VoiceConfig


@pytest.fixture
def engine():
    engine = MagicMock(spec=PiperTTS)
    engine.select_voice.side_effect = lambda requested=None: requested or "bryce"
    engine.synthesize.return_value = b"RIFF"
    return engine


@pytest.fixture
def client(monkeypatch, engine):
    monkeypatch.setattr(main, "confirmation", TTSConfirmation(VoiceConfig(), engine=engine))
    return TestClient(main.app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "voice_enabled": True}


def test_parse_accepts_legal_move(client):
    response = client.post("/voice/parse", json={"transcript": "night to f three"})
    assert response.status_code == 200
    body = response.json()
    assert body["accepted"] is True
    assert body["san"] == "Nf3"
    assert body["spoken"] == "Knight to f-3 confirmed"
    assert body["normalized"]["normalized"] == "knight 2 f3"
    assert body["tts"]["text"] == "Knight to f-3 confirmed"
    assert body["fen"] == chess.STARTING_FEN


def test_parse_applies_move(client):
    response = client.post("/voice/parse", json={"transcript": "pawn to e4", "apply": True})
    body = response.json()
    assert body["accepted"] is True
    board = chess.Board()
    board.push_san("e4")
    assert body["fen"] == board.fen()


def test_parse_rejects_illegal_move(client):
    body = client.post("/voice/parse", json={"transcript": "queen to h5"}).json()
    assert body["accepted"] is False
    assert body["spoken"] == "That move is not legal."


def test_parse_with_position(client):
    board = chess.Board()
    for san in ["e4", "d5"]:
        board.push_san(san)
    body = client.post("/voice/parse", json={"transcript": "pawn takes d5", "fen": board.fen()}).json()
    assert body["san"] == "exd5"
    assert body["result"]["confidence"] == pytest.approx(0.80)


def test_parse_invalid_fen(client):
    response = client.post("/voice/parse", json={"transcript": "e4", "fen": "not a fen"})
    assert response.status_code == 400


def test_confirm(client):
    body = client.post("/voice/confirm", json={"san": "O-O-O"}).json()
    assert body["tts"]["text"] == "Long castle confirmed"
    assert "audio" in body["tts"]


@pytest.mark.parametrize(
    "payload, text",
    [
        ({"event": "check"}, "Check!"),
        ({"event": "checkmate", "winner": "black"}, "Checkmate! black wins!"),
        ({"event": "stalemate"}, "Stalemate! The game is a draw."),
        ({"event": "illegal"}, "That move is not legal."),
        ({"event": "error", "message": "No speech detected"}, "Error: No speech detected"),
    ],
)
def test_announce(client, payload, text):
    body = client.post("/voice/announce", json=payload).json()
    assert body["text"] == text


def test_announce_unknown_event(client):
    assert client.post("/voice/announce", json={"event": "resign"}).status_code == 400


@pytest.mark.parametrize("payload", [{"event": "checkmate"}, {"event": "checkmate", "winner": "green"}])
def test_announce_checkmate_needs_winner(client, payload):
    assert client.post("/voice/announce", json=payload).status_code == 400


def test_speak_with_voice(client, engine):
    response = client.post("/tts/speak", json={"text": "Hello", "voice": "hfc_male"})
    assert response.status_code == 200
    assert response.json()["tts"]["text"] == "Hello"
    assert engine.synthesize.call_args.args[1] == "hfc_male"


def test_speak_empty_text(client):
    assert client.post("/tts/speak", json={"text": "  "}).status_code == 400


def test_speak_while_disabled(client):
    main.confirmation.set_enabled(False)
    assert client.post("/tts/speak", json={"text": "Hello"}).status_code == 503
