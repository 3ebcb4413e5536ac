"""Spoken confirmation phrases for moves and game events.

``format_move_confirmation`` walks the SAN grammar left to right:

- ``Nf3``   -> ``Knight to f-3 confirmed``
- ``exd5``  -> ``Pawn on e-file takes d-5 confirmed``
- ``e8=Q``  -> ``Pawn to e-8, promotes to queen confirmed``
- ``Qh7#``  -> ``Queen to h-7, checkmate confirmed``
- ``O-O``   -> ``Short castle confirmed``

Malformed input never raises; whatever parts can be read are spoken.
"""

from __future__ import annotations

import re
from typing import Dict, Optional

PIECE_WORDS_SPOKEN: Dict[str, str] = {
    "K": "King",
    "Q": "Queen",
    "R": "Rook",
    "B": "Bishop",
    "N": "Knight",
}

PROMOTION_NAMES: Dict[str, str] = {
    "Q": "queen",
    "R": "rook",
    "B": "bishop",
    "N": "knight",
}

CASTLING_PHRASES: Dict[str, str] = {
    "O-O": "Short castle",
    "O-O-O": "Long castle",
}

CHECK_PHRASES: Dict[str, str] = {
    "+": ", check",
    "#": ", checkmate",
}

SAN_PATTERN = re.compile(
    r"^(?P<piece>[KQRBN])?"
    r"(?P<file>[a-h])?(?P<rank>[1-8])?"
    r"(?P<capture>x)?"
    r"(?P<square>[a-h][1-8])"
    r"(?:=(?P<promotion>[QRBN]))?"
    r"(?P<suffix>[+#])?"
)
_SQUARE = re.compile(r"[a-h][1-8]")
_PROMOTION = re.compile(r"=([QRBN])")


def _spoken_square(square: str) -> str:
    return f"{square[0]}-{square[1]}"


def _disambiguation(file: Optional[str], rank: Optional[str]) -> str:
    if file and rank:
        return f" on {file}-{rank}"
    if file:
        return f" on {file}-file"
    if rank:
        return f" on rank {rank}"
    return ""


def _format_castling(san: str) -> Optional[str]:
    core = san.replace("0", "O").rstrip("+#")
    phrase = CASTLING_PHRASES.get(core)
    if phrase is None:
        return None
    return phrase + CHECK_PHRASES.get(san[-1], "")


def _format_partial(san: str) -> str:
    """Best-effort phrase for SAN the grammar walk could not read."""
    phrase = PIECE_WORDS_SPOKEN.get(san[:1], "Pawn")
    squares = _SQUARE.findall(san)
    if squares:
        verb = "takes" if "x" in san else "to"
        phrase += f" {verb} {_spoken_square(squares[-1])}"
    promotion = _PROMOTION.search(san)
    if promotion:
        phrase += f", promotes to {PROMOTION_NAMES[promotion.group(1)]}"
    return phrase + CHECK_PHRASES.get(san[-1], "")


def san_to_confirmation_text(san: str) -> str:
    """Spoken form of a SAN move without the trailing 'confirmed'."""
    s = (san or "").strip()
    if not s:
        return "Move"

    castling = _format_castling(s)
    if castling is not None:
        return castling

    match = SAN_PATTERN.match(s)
    if not match:
        return _format_partial(s)

    parts = [PIECE_WORDS_SPOKEN.get(match.group("piece") or "", "Pawn")]
    parts.append(_disambiguation(match.group("file"), match.group("rank")))
    parts.append(" takes " if match.group("capture") else " to ")
    parts.append(_spoken_square(match.group("square")))
    if match.group("promotion"):
        parts.append(f", promotes to {PROMOTION_NAMES[match.group('promotion')]}")
    parts.append(CHECK_PHRASES.get(match.group("suffix") or "", ""))
    return "".join(parts)


def format_move_confirmation(san: str) -> str:
    return f"{san_to_confirmation_text(san)} confirmed"


def format_check() -> str:
    return "Check!"


def format_checkmate(winner: str) -> str:
    return f"Checkmate! {winner} wins!"


def format_stalemate() -> str:
    return "Stalemate! The game is a draw."


def format_error(message: str) -> str:
    return f"Error: {message}"


def format_illegal_move() -> str:
    return "That move is not legal."


__all__ = [
    "format_check",
    "format_checkmate",
    "format_error",
    "format_illegal_move",
    "format_move_confirmation",
    "format_stalemate",
    "san_to_confirmation_text",
]
