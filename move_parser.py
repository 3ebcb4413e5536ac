"""
Voice move parsing.

Turns a transcript into a single SAN proposal plus a confidence score.  The
parser tries an ordered list of matcher functions over the normalized text
(castling, the fixed spoken shapes, then resolution against the legal move
list) and the first one that proposes a move wins.

Nothing here decides legality.  ``legal_moves`` only raises the confidence
of a proposal; the caller still has to submit the SAN to python-chess.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

import chess

from chess_normalizer import CASTLE_TOKEN, PIECE_ABBREVIATIONS, PIECE_SYMBOLS, SQUARE_REGEX, normalize

logger = logging.getLogger(__name__)


# --- Confidence table ------------------------------------------------------

CASTLE_EXPLICIT_CONFIDENCE = 0.95
CASTLE_DEFAULT_CONFIDENCE = 0.80
PATTERN_VALIDATED_CONFIDENCE = 0.90
PATTERN_UNVALIDATED_CONFIDENCE = 0.70
CONTEXT_UNIQUE_CONFIDENCE = 0.80
CONTEXT_PIECE_CONFIDENCE = 0.85

PARSE_ERROR = "Could not parse chess move"
AMBIGUOUS_ERROR = "Ambiguous move"

CHECK_MARKERS: Dict[str, str] = {"check": "+", "checkmate": "#"}

KINGSIDE_CASTLE = "O-O"
QUEENSIDE_CASTLE = "O-O-O"


@dataclass(frozen=True)
class ParseContext:
    """Snapshot of the position supplied by the rules authority."""

    current_fen: str
    legal_moves: Tuple[str, ...] = ()
    last_move: Optional[str] = None
    player_color: str = "white"

    def __post_init__(self) -> None:
        object.__setattr__(self, "legal_moves", tuple(self.legal_moves))

    @classmethod
    def from_board(cls, board: chess.Board) -> "ParseContext":
        """Build a context from a python-chess board, legal moves in generation order."""
        last_move = None
        if board.move_stack:
            previous = board.copy()
            move = previous.pop()
            last_move = previous.san(move)
        return cls(
            current_fen=board.fen(),
            legal_moves=tuple(board.san(move) for move in board.legal_moves),
            last_move=last_move,
            player_color="white" if board.turn == chess.WHITE else "black",
        )


@dataclass(frozen=True)
class ChessMoveResult:
    san: Optional[str]
    confidence: float
    original_text: str
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "san": self.san,
            "confidence": self.confidence,
            "original_text": self.original_text,
            "error": self.error,
        }


@dataclass(frozen=True)
class MoveCandidate:
    """What a single matcher proposes.

    ``san`` is None when the matcher recognised the utterance but refused to
    guess (an ambiguous destination); ``error`` then says why.  A
    ``provisional`` candidate was not found in the supplied legal moves.
    ``piece`` is the SAN letter the speaker named ("" for "pawn" or a pawn
    file, None when no piece was named) and ``source_file`` the pawn file
    they named, if any.
    """

    san: Optional[str]
    confidence: float
    provisional: bool = False
    error: Optional[str] = None
    piece: Optional[str] = None
    source_file: str = ""

    def agrees_with(self, san: str) -> bool:
        """True when ``san`` moves the piece (and pawn file) that was spoken."""
        if self.piece is None:
            return True
        if _piece_letter(san) != self.piece:
            return False
        return not self.source_file or san.startswith(self.source_file)


class SpokenMove(NamedTuple):
    san: str
    piece: Optional[str] = None
    source_file: str = ""


Strategy = Callable[[str, Optional[ParseContext]], Optional[MoveCandidate]]


def _piece_letter(san: str) -> str:
    return san[0] if san and san[0] in "KQRBN" else ""


# --- Strategy 1: castling --------------------------------------------------


def _has_pair(tokens: Sequence[str], first: str, second: str) -> bool:
    return any(a == first and b == second for a, b in zip(tokens, tokens[1:]))


def match_castling(normalized: str, context: Optional[ParseContext] = None) -> Optional[MoveCandidate]:
    tokens = normalized.split()
    if CASTLE_TOKEN not in tokens:
        return None

    if "short" in tokens or _has_pair(tokens, "king", "side"):
        return MoveCandidate(KINGSIDE_CASTLE, CASTLE_EXPLICIT_CONFIDENCE)
    if "long" in tokens or _has_pair(tokens, "queen", "side"):
        return MoveCandidate(QUEENSIDE_CASTLE, CASTLE_EXPLICIT_CONFIDENCE)
    # Bare "castle" defaults to the king side.
    return MoveCandidate(KINGSIDE_CASTLE, CASTLE_DEFAULT_CONFIDENCE)


# --- Strategy 2: fixed spoken shapes ---------------------------------------

_CHECK_SUFFIX = r"(?:\s+(?P<check>check|checkmate))?$"

# "knight 2 f3", "queen takes e5 check", "2 e4"
PIECE_NAME_PATTERN = re.compile(
    r"^(?:(?P<piece>knight|bishop|rook|queen|king|pawn)\s+)?(?P<connector>2|takes)\s+(?P<square>[a-h][1-8])"
    + _CHECK_SUFFIX
)
# "e takes d5", "exd5", "e e4"
PAWN_FILE_PATTERN = re.compile(
    r"^(?P<file>[a-h])\s*(?:(?P<capture>takes|x)\s*)?(?P<square>[a-h][1-8])" + _CHECK_SUFFIX
)
# "nf3", "q takes e5", "e4"
ABBREVIATION_PATTERN = re.compile(
    r"^(?:(?P<letter>[nbrqk])\s*)?(?:(?P<capture>takes|x)\s*)?(?P<square>[a-h][1-8])" + _CHECK_SUFFIX
)


def _assemble_san(piece_letter: str, square: str, check: Optional[str], capture: bool = False, source_file: str = "") -> str:
    # A capture marker without a piece letter or source file is not valid SAN.
    marker = "x" if capture and (piece_letter or source_file) else ""
    return f"{piece_letter}{source_file}{marker}{square}{CHECK_MARKERS.get(check or '', '')}"


def _match_piece_name(normalized: str) -> Optional[SpokenMove]:
    match = PIECE_NAME_PATTERN.match(normalized)
    if not match:
        return None
    piece_name = match.group("piece")
    piece_letter = PIECE_SYMBOLS[piece_name or "pawn"]
    san = _assemble_san(piece_letter, match.group("square"), match.group("check"), capture=match.group("connector") == "takes")
    return SpokenMove(san, piece=piece_letter if piece_name else None)


def _match_pawn_file(normalized: str) -> Optional[SpokenMove]:
    match = PAWN_FILE_PATTERN.match(normalized)
    if not match:
        return None
    source_file, square = match.group("file"), match.group("square")
    if match.group("capture"):
        # "bxc4" stays a pawn capture: SAN never writes a bishop capture that way.
        san = _assemble_san("", square, match.group("check"), capture=True, source_file=source_file)
        return SpokenMove(san, piece="", source_file=source_file)
    if source_file != square[0]:
        # "bc4" reads as a piece abbreviation, not a pawn move.
        return None
    return SpokenMove(_assemble_san("", square, match.group("check")), piece="", source_file=source_file)


def _match_abbreviation(normalized: str) -> Optional[SpokenMove]:
    match = ABBREVIATION_PATTERN.match(normalized)
    if not match:
        return None
    letter = match.group("letter")
    piece_letter = PIECE_ABBREVIATIONS.get(letter or "", "")
    san = _assemble_san(piece_letter, match.group("square"), match.group("check"), capture=bool(match.group("capture")))
    return SpokenMove(san, piece=piece_letter if letter else None)


_SHAPE_MATCHERS: Tuple[Callable[[str], Optional[SpokenMove]], ...] = (
    _match_piece_name,
    _match_pawn_file,
    _match_abbreviation,
)


def match_standard_pattern(normalized: str, context: Optional[ParseContext] = None) -> Optional[MoveCandidate]:
    for matcher in _SHAPE_MATCHERS:
        spoken = matcher(normalized)
        if spoken is None:
            continue
        if context is not None and spoken.san in context.legal_moves:
            return MoveCandidate(spoken.san, PATTERN_VALIDATED_CONFIDENCE)
        return MoveCandidate(
            spoken.san,
            PATTERN_UNVALIDATED_CONFIDENCE,
            provisional=context is not None,
            piece=spoken.piece,
            source_file=spoken.source_file,
        )
    return None


# --- Strategy 3: resolution against the legal move list --------------------

_SAN_TARGET = re.compile(r"([a-h][1-8])(?:=[QRBN])?[+#]?$")


def target_square(san: str) -> Optional[str]:
    """Destination square of a SAN move, or None for castling/garbage."""
    if san.startswith("O"):
        return None
    match = _SAN_TARGET.search(san)
    return match.group(1) if match else None


def legal_candidates(context: ParseContext, square: str) -> List[str]:
    """Legal moves landing on ``square``, castling excluded."""
    return [move for move in context.legal_moves if target_square(move) == square]


def match_legal_destination(normalized: str, context: Optional[ParseContext] = None) -> Optional[MoveCandidate]:
    if context is None:
        return None

    tokens = normalized.split()
    squares = [token for token in tokens if SQUARE_REGEX.match(token)]
    if not squares:
        return None
    # The destination is spoken last ("e2 e4", "knight on g1 to f3").
    destination = squares[-1]

    candidates = legal_candidates(context, destination)
    if not candidates:
        return None
    if len(candidates) == 1:
        return MoveCandidate(candidates[0], CONTEXT_UNIQUE_CONFIDENCE)

    piece_name = next((token for token in tokens if token in PIECE_SYMBOLS), None)
    if piece_name is not None:
        symbol = PIECE_SYMBOLS[piece_name]
        narrowed = [move for move in candidates if _piece_letter(move) == symbol]
        if narrowed:
            if len(narrowed) > 1:
                logger.debug("Tie-break on %s among %s; taking first in legal move order", piece_name, narrowed)
            return MoveCandidate(narrowed[0], CONTEXT_PIECE_CONFIDENCE)

    return MoveCandidate(None, 0.0, error=f"{AMBIGUOUS_ERROR}: {', '.join(candidates)}")


STRATEGIES: Tuple[Strategy, ...] = (
    match_castling,
    match_standard_pattern,
    match_legal_destination,
)


# --- Public entry points ---------------------------------------------------


def generate(normalized: str, context: Optional[ParseContext] = None, original_text: Optional[str] = None) -> ChessMoveResult:
    """Run the strategies over already normalized text.

    The first non-provisional proposal wins.  A provisional proposal (not in
    the supplied legal moves) is held back so a later strategy can find the
    legal spelling of the same move ("pawn takes d5" -> "exd5").  A later
    move that contradicts the piece or pawn file the speaker named never
    replaces it; the provisional proposal is returned instead.  An ambiguity
    only wins over a provisional proposal that named no piece.
    """
    original = normalized if original_text is None else original_text
    deferred: Optional[MoveCandidate] = None
    ambiguity: Optional[str] = None

    for strategy in STRATEGIES:
        candidate = strategy(normalized, context)
        if candidate is None:
            continue
        if candidate.san is None:
            ambiguity = ambiguity or candidate.error
            continue
        if candidate.provisional:
            deferred = deferred or candidate
            continue
        if deferred is not None and not deferred.agrees_with(candidate.san):
            logger.debug("Keeping spoken %s over legal %s", deferred.san, candidate.san)
            break
        return ChessMoveResult(candidate.san, candidate.confidence, original)

    if ambiguity is not None and (deferred is None or deferred.piece is None):
        return ChessMoveResult(None, 0.0, original, ambiguity)
    if deferred is not None:
        return ChessMoveResult(deferred.san, deferred.confidence, original)
    return ChessMoveResult(None, 0.0, original, PARSE_ERROR)


def parse_move(transcript: Optional[str], context: Optional[ParseContext] = None) -> ChessMoveResult:
    original = transcript or ""
    cleaned = normalize(original)
    logger.debug('Parsing: "%s" -> "%s"', original, cleaned)
    return generate(cleaned, context, original_text=original)


__all__ = [
    "AMBIGUOUS_ERROR",
    "ChessMoveResult",
    "MoveCandidate",
    "PARSE_ERROR",
    "ParseContext",
    "STRATEGIES",
    "generate",
    "legal_candidates",
    "match_castling",
    "match_legal_destination",
    "match_standard_pattern",
    "parse_move",
    "target_square",
]
