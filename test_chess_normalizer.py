"""
Tests for the transcript normalizer.

Covers:
1. Homophone substitution and filler removal
2. Punctuation, capitalization and spacing
3. Square merging
4. Idempotency on realistic transcripts
"""

import pytest

from chess_normalizer import HOMOPHONES, normalize, normalize_transcription


# ---------------------------------------------------------------------------
# Homophones and fillers
# ---------------------------------------------------------------------------


def test_homophones_become_canonical_tokens():
    assert normalize("night to f three") == "knight 2 f3"
    assert normalize("won two three") == "1 2 3"
    assert normalize("for ate") == "4 8"


def test_filler_words_are_dropped():
    assert normalize("move the knight to f3") == "knight 2 f3"
    assert normalize("pawn goes to e4") == "pawn 2 e4"
    assert normalize("please move the knight piece to the f3 square on the board") == "knight 2 f3"


def test_action_words_share_one_token():
    assert normalize("queen captures e5") == "queen takes e5"
    assert normalize("bishop x c6") == "bishop takes c6"


def test_castle_is_not_turned_into_a_rook():
    assert normalize("castles kingside") == "castle short"
    assert normalize("tower to a3") == "rook 2 a3"


def test_check_mate_collapses():
    assert normalize("queen to h7 check mate") == "queen 2 h7 checkmate"


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------


def test_punctuation_and_capitalization():
    assert normalize("Knight to F3!") == "knight 2 f3"
    assert normalize("Queen, takes e5?") == "queen takes e5"


def test_extra_whitespace_is_collapsed():
    assert normalize("  KNIGHT    TO    F3  ") == "knight 2 f3"


def test_empty_input():
    assert normalize("") == ""
    assert normalize(None) == ""
    assert normalize("   ") == ""
    assert normalize("?!") == ""


def test_result_reports_applied_rules():
    result = normalize_transcription("night to f three")
    assert result.normalized == "knight 2 f3"
    assert result.tokens == ["night", "to", "f", "three"]
    assert "mapped 'night' -> 'knight'" in result.applied_rules
    assert "merged square 'f3'" in result.applied_rules
    assert result.to_dict()["normalized"] == "knight 2 f3"


# ---------------------------------------------------------------------------
# Idempotency
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "transcript",
    [
        "night to f three",
        "Queen, takes e5?",
        "castle queen side",
        "pawn e to e four",
        "check check mate",
        "a a one",
        "f f 3 3",
        "gibberish nonsense",
        "the the the",
    ],
)
def test_normalize_is_idempotent(transcript):
    once = normalize(transcript)
    assert normalize(once) == once


def test_canonical_tokens_are_fixed_points():
    for canonical in {value for value in HOMOPHONES.values() if value}:
        assert HOMOPHONES.get(canonical, canonical) == canonical
