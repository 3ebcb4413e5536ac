"""Tests for the transcript -> rules authority -> spoken reply flow."""

import chess
import pytest

from voice_bridge import VoiceBridge, game_state_announcements, is_legal_san


@pytest.fixture
def bridge():
    return VoiceBridge()


def _board(*moves):
    board = chess.Board()
    for san in moves:
        board.push_san(san)
    return board


def test_accepted_move_is_confirmed(bridge):
    board = chess.Board()
    outcome = bridge.process_transcript("knight to f three", board)
    assert outcome.accepted
    assert outcome.san == "Nf3"
    assert outcome.spoken == "Knight to f-3 confirmed"
    assert board.move_stack == []


def test_apply_pushes_move(bridge):
    board = chess.Board()
    outcome = bridge.process_transcript("e4", board, apply=True)
    assert outcome.accepted
    assert board.peek() == chess.Move.from_uci("e2e4")
    assert outcome.announcements == []


def test_outcome_carries_normalization(bridge):
    outcome = bridge.process_transcript("Night to F three", chess.Board())
    assert outcome.normalization.normalized == "knight 2 f3"
    assert outcome.to_dict()["normalized"]["normalized"] == "knight 2 f3"
    assert outcome.result.original_text == "Night to F three"


def test_illegal_proposal_is_rejected(bridge):
    board = chess.Board()
    outcome = bridge.process_transcript("queen to h5", board)
    assert outcome.result.san == "Qh5"
    assert not outcome.accepted
    assert outcome.san is None
    assert outcome.spoken == "That move is not legal."


def test_unparseable_transcript(bridge):
    outcome = bridge.process_transcript("gibberish nonsense", chess.Board())
    assert not outcome.accepted
    assert outcome.spoken == "Error: Could not understand move"
    assert outcome.to_dict()["result"]["error"] == "Could not parse chess move"


def test_checkmate_announcement(bridge):
    board = _board("f3", "e5", "g4")
    outcome = bridge.process_transcript("queen to h4", board, apply=True)
    assert outcome.san == "Qh4#"
    assert outcome.spoken == "Queen to h-4, checkmate confirmed"
    assert outcome.announcements == ["Checkmate! black wins!"]


def test_check_announcement():
    board = _board("e4", "f5", "Qh5+")
    assert game_state_announcements(board) == ["Check!"]


def test_stalemate_announcement():
    board = chess.Board("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert game_state_announcements(board) == ["Stalemate! The game is a draw."]


def test_is_legal_san():
    board = chess.Board()
    assert is_legal_san(board, "Nf3")
    assert not is_legal_san(board, "Nf4")
    assert not is_legal_san(board, "not a move")
