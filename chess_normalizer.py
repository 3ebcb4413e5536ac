"""
Chess speech normalization utilities.

The goal is to turn slightly messy speech-to-text output such as
"Night to F three!" into a canonical token stream ("knight 2 f3") that the
move parser can match against a handful of fixed shapes.  The logic is
intentionally rule-based and deterministic so we can unit test and tweak it
as new edge-cases are reported.

Normalizing an already normalized string returns it unchanged: every value in
``HOMOPHONES`` is either absent from the table or maps to itself, and merged
squares are never split again.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence


@dataclass
class NormalizationResult:
    """Structured information produced by the normalizer."""

    raw_text: str
    cleaned_text: str
    tokens: List[str]
    mapped_tokens: List[str]
    normalized: str
    applied_rules: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "raw_text": self.raw_text,
            "cleaned_text": self.cleaned_text,
            "tokens": self.tokens,
            "mapped_tokens": self.mapped_tokens,
            "normalized": self.normalized,
            "applied_rules": self.applied_rules,
        }


# --- Dictionaries & helper constants ---------------------------------------

NUMBER_WORDS: Dict[str, str] = {
    "one": "1",
    "won": "1",
    "two": "2",
    "too": "2",
    "to": "2",
    "tu": "2",
    "three": "3",
    "tree": "3",
    "free": "3",
    "four": "4",
    "for": "4",
    "fore": "4",
    "five": "5",
    "fife": "5",
    "six": "6",
    "sick": "6",
    "seven": "7",
    "eight": "8",
    "ate": "8",
    "ait": "8",
}

LETTER_WORDS: Dict[str, str] = {
    "a": "a",
    "ay": "a",
    "be": "b",
    "bee": "b",
    "see": "c",
    "sea": "c",
    "cee": "c",
    "dee": "d",
    "e": "e",
    "ee": "e",
    "ef": "f",
    "eff": "f",
    "gee": "g",
    "jee": "g",
    "aitch": "h",
    "etch": "h",
}

PIECE_WORDS: Dict[str, str] = {
    "knight": "knight",
    "knights": "knight",
    "night": "knight",
    "nights": "knight",
    "nite": "knight",
    "knite": "knight",
    "bishop": "bishop",
    "bishops": "bishop",
    "biship": "bishop",
    "beshop": "bishop",
    "bshop": "bishop",
    "rook": "rook",
    "rooks": "rook",
    "rock": "rook",
    "ruke": "rook",
    "tower": "rook",
    "queen": "queen",
    "queens": "queen",
    "quin": "queen",
    "king": "king",
    "kings": "king",
    "pawn": "pawn",
    "pawns": "pawn",
    "pond": "pawn",
    "prawn": "pawn",
}

ACTION_WORDS: Dict[str, str] = {
    "take": "takes",
    "takes": "takes",
    "taking": "takes",
    "capture": "takes",
    "captures": "takes",
    "capturing": "takes",
    "x": "takes",
    "ex": "takes",
    "cross": "takes",
    "times": "takes",
    "check": "check",
    "plus": "check",
    "checkmate": "checkmate",
    "mate": "checkmate",
    "castle": "castle",
    "castles": "castle",
    "castling": "castle",
    "short": "short",
    "kingside": "short",
    "long": "long",
    "queenside": "long",
}

# Tokens that carry no move information; they normalize to the empty string.
STOP_WORDS: FrozenSet[str] = frozenset(
    {
        "move",
        "moves",
        "go",
        "goes",
        "the",
        "an",
        "piece",
        "pieces",
        "please",
        "square",
        "board",
        "on",
        "my",
        "i",
        "play",
        "plays",
    }
)

HOMOPHONES: Mapping[str, str] = MappingProxyType(
    {
        **NUMBER_WORDS,
        **LETTER_WORDS,
        **PIECE_WORDS,
        **ACTION_WORDS,
        **{word: "" for word in STOP_WORDS},
    }
)

PIECE_SYMBOLS: Mapping[str, str] = MappingProxyType(
    {
        "king": "K",
        "queen": "Q",
        "rook": "R",
        "bishop": "B",
        "knight": "N",
        "pawn": "",
    }
)

PIECE_ABBREVIATIONS: Mapping[str, str] = MappingProxyType(
    {
        "k": "K",
        "q": "Q",
        "r": "R",
        "b": "B",
        "n": "N",
    }
)

CASTLE_TOKEN = "castle"
FILES = "abcdefgh"
RANKS = "12345678"

SQUARE_REGEX = re.compile(r"^[a-h][1-8]$")
_DISALLOWED_CHARS = re.compile(r"[^a-z0-9\s]")


# --- Normalization helpers -------------------------------------------------


def _map_tokens(tokens: Sequence[str], applied_rules: List[str]) -> List[str]:
    mapped: List[str] = []
    for token in tokens:
        replacement = HOMOPHONES.get(token, token)
        if replacement != token:
            if replacement:
                applied_rules.append(f"mapped '{token}' -> '{replacement}'")
            else:
                applied_rules.append(f"removed filler '{token}'")
        if replacement:
            mapped.append(replacement)
    return mapped


def _merge_tokens(tokens: Sequence[str], applied_rules: List[str]) -> List[str]:
    """Merge ['f', '3'] -> ['f3'] and collapse ['check', 'checkmate'] -> ['checkmate']."""
    merged: List[str] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        next_token = tokens[i + 1] if i + 1 < len(tokens) else None

        if len(token) == 1 and token in FILES and next_token is not None and len(next_token) == 1 and next_token in RANKS:
            merged.append(token + next_token)
            applied_rules.append(f"merged square '{token}{next_token}'")
            i += 2
            continue

        if token == "checkmate" and merged and merged[-1] == "check":
            while merged and merged[-1] == "check":
                merged.pop()
            applied_rules.append("check mate -> checkmate")

        merged.append(token)
        i += 1
    return merged


def normalize_transcription(raw_text: Optional[str]) -> NormalizationResult:
    """Normalize STT output into a canonical token stream."""
    if not raw_text:
        return NormalizationResult(
            raw_text=raw_text or "",
            cleaned_text="",
            tokens=[],
            mapped_tokens=[],
            normalized="",
            applied_rules=["empty input"],
        )

    applied_rules: List[str] = []
    cleaned = _DISALLOWED_CHARS.sub("", raw_text.lower())
    tokens = cleaned.split()
    mapped = _map_tokens(tokens, applied_rules)
    merged = _merge_tokens(mapped, applied_rules)

    return NormalizationResult(
        raw_text=raw_text,
        cleaned_text=cleaned,
        tokens=tokens,
        mapped_tokens=merged,
        normalized=" ".join(merged),
        applied_rules=applied_rules,
    )


def normalize(text: Optional[str]) -> str:
    """Return the canonical, space-joined token stream for a transcript."""
    return normalize_transcription(text).normalized


__all__ = [
    "CASTLE_TOKEN",
    "HOMOPHONES",
    "NormalizationResult",
    "PIECE_ABBREVIATIONS",
    "PIECE_SYMBOLS",
    "SQUARE_REGEX",
    "STOP_WORDS",
    "normalize",
    "normalize_transcription",
]
