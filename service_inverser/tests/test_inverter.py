"""
Unit tests for word inversion functions.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_inverser.app.inversion.inverter import (
    find_core_bounds,
    invert,
    invert_sentence,
    normalize_core,
    reconstruct,
)


class TestNormalizeCore:
    """Test cases for cache key normalization."""

    @pytest.mark.parametrize("token,expected", [
        ("hello", "hello"),
        ("Hello", "hello"),
        ("!Hello?", "hello"),
        ("...WoRlD!!!", "world"),
        ("don't", "don't"),
        ("(e-mail)", "e-mail"),
        ("abc123", "abc123"),
        ("#42", "42"),
    ])
    def test_normalize_core(self, token, expected):
        """Test boundary trimming and lowercasing."""
        assert normalize_core(token) == expected

    @pytest.mark.parametrize("token", ["", " ", "   ", "!", "?!...", "--"])
    def test_normalize_core_without_alphanumerics(self, token):
        """Test tokens with nothing to invert produce an empty key."""
        assert normalize_core(token) == ""

    @pytest.mark.parametrize("token", ["!Hello?", "A", "x-Y-z", "'Quoted'", "MiXeD123!", "..."])
    def test_normalize_core_is_lowercase_and_trimmed(self, token):
        """Test the key is lowercase with no boundary punctuation."""
        key = normalize_core(token)

        assert key == key.lower()
        if key:
            assert key[0].isalnum()
            assert key[-1].isalnum()

    def test_normalize_core_is_stable_on_keys(self):
        """Test normalizing a key again returns the same key."""
        key = normalize_core("**Don't**")
        assert normalize_core(key) == key


class TestInvert:
    """Test cases for boundary-preserving inversion."""

    @pytest.mark.parametrize("token,expected", [
        ("hello", "olleh"),
        ("Hello", "olleH"),
        ("!hello?", "!olleh?"),
        ("!Hello?", "!olleH?"),
        ("(world)!", "(dlrow)!"),
        ("don't", "t'nod"),
        ("abc123", "321cba"),
        ("...ab...", "...ba..."),
    ])
    def test_invert(self, token, expected):
        """Test the core is reversed and boundaries kept."""
        assert invert(token) == expected

    @pytest.mark.parametrize("token", ["", " ", "  ", "!", "?!", "a", "!a?", "7"])
    def test_invert_returns_token_unchanged(self, token):
        """Test blank, punctuation-only and single-character cores pass through."""
        assert invert(token) == token

    @pytest.mark.parametrize("token", ["hello", "!Hello?", "don't", "(e-mail)", "ab", "x1y2z3", "'Q'"])
    def test_invert_is_an_involution(self, token):
        """Test inverting twice restores the token."""
        assert invert(invert(token)) == token

    def test_find_core_bounds(self):
        """Test inclusive alphanumeric bounds."""
        assert find_core_bounds("!ab?") == (1, 2)
        assert find_core_bounds("abc") == (0, 2)

        left, right = find_core_bounds("?!")
        assert left > right


class TestReconstruct:
    """Test cases for re-dressing cached cores."""

    def test_reconstruct_keeps_boundary_punctuation(self):
        """Test prefix and suffix come from the original token."""
        assert reconstruct("!Hello?", "olleh") == "!olleh?"
        assert reconstruct("((world))", "dlrow") == "((dlrow))"

    def test_reconstruct_does_not_restore_casing(self):
        """Test the cached lowercase core replaces the original casing."""
        assert reconstruct("HELLO", "olleh") == "olleh"

    @pytest.mark.parametrize("token", ["", "  ", "?!"])
    def test_reconstruct_without_core_returns_original(self, token):
        """Test tokens without a core are returned unchanged."""
        assert reconstruct(token, "anything") == token


class TestInvertSentence:
    """Test cases for cacheless sentence inversion."""

    def test_invert_sentence(self):
        """Test every token is inverted."""
        assert invert_sentence("Hello, world!") == "olleH, dlrow!"

    def test_invert_sentence_preserves_spacing(self):
        """Test runs of spaces survive the split and rejoin."""
        assert invert_sentence("  ab  cd ") == "  ba  dc "

    @pytest.mark.parametrize("sentence", ["", "   "])
    def test_invert_sentence_blank(self, sentence):
        """Test blank sentences are returned unchanged."""
        assert invert_sentence(sentence) == sentence
