"""
Glue between a transcript, the move parser and the rules authority.

The parser only proposes a move.  ``VoiceBridge.process_transcript`` submits
that proposal to python-chess, which has the final say, and chooses the
phrase to speak back: a move confirmation, an illegal-move notice or an
error.  When asked to apply the move it also queues the check / checkmate /
stalemate announcements for the resulting position.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import chess

from chess_normalizer import NormalizationResult, normalize_transcription
from move_confirmation import (
    format_check,
    format_checkmate,
    format_error,
    format_illegal_move,
    format_move_confirmation,
    format_stalemate,
)
from move_parser import ChessMoveResult, ParseContext, generate

logger = logging.getLogger(__name__)

UNDERSTAND_ERROR = "Could not understand move"


def resolve_san(board: chess.Board, san: str) -> Optional[chess.Move]:
    """Return the legal move ``san`` denotes on ``board``, or None."""
    try:
        return board.parse_san(san)
    except ValueError:
        return None


def is_legal_san(board: chess.Board, san: str) -> bool:
    return resolve_san(board, san) is not None


def game_state_announcements(board: chess.Board) -> List[str]:
    if board.is_checkmate():
        winner = "black" if board.turn == chess.WHITE else "white"
        return [format_checkmate(winner)]
    if board.is_stalemate():
        return [format_stalemate()]
    if board.is_check():
        return [format_check()]
    return []


@dataclass
class VoiceOutcome:
    result: ChessMoveResult
    normalization: NormalizationResult
    accepted: bool
    spoken: str
    san: Optional[str] = None
    announcements: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "result": self.result.to_dict(),
            "normalized": self.normalization.to_dict(),
            "accepted": self.accepted,
            "san": self.san,
            "spoken": self.spoken,
            "announcements": self.announcements,
        }


class VoiceBridge:
    """Runs one transcript through parsing, legality and confirmation."""

    def process_transcript(self, transcript: str, board: chess.Board, apply: bool = False) -> VoiceOutcome:
        context = ParseContext.from_board(board)
        normalization = normalize_transcription(transcript)
        logger.info('Voice transcript: "%s" -> "%s"', transcript, normalization.normalized)
        result = generate(normalization.normalized, context, original_text=transcript or "")

        if result.san is None:
            logger.info('No move parsed from "%s": %s', transcript, result.error)
            return VoiceOutcome(result=result, normalization=normalization, accepted=False, spoken=format_error(UNDERSTAND_ERROR))

        move = resolve_san(board, result.san)
        if move is None:
            logger.info("Rules authority rejected %s (confidence %.2f)", result.san, result.confidence)
            return VoiceOutcome(result=result, normalization=normalization, accepted=False, spoken=format_illegal_move())

        san = board.san(move)
        outcome = VoiceOutcome(
            result=result,
            normalization=normalization,
            accepted=True,
            spoken=format_move_confirmation(san),
            san=san,
        )
        if apply:
            board.push(move)
            outcome.announcements = game_state_announcements(board)
        logger.info("Voice move accepted: %s (confidence %.2f)", san, result.confidence)
        return outcome


__all__ = [
    "VoiceBridge",
    "VoiceOutcome",
    "game_state_announcements",
    "is_legal_san",
    "resolve_san",
]
