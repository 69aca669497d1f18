"""Tests for pi.kilo.keys -- decoding raw input into key events."""

from __future__ import annotations

import pytest

from pi.kilo.keys import (
    CSI_LETTER_KEYS,
    CSI_TILDE_KEYS,
    SS3_KEYS,
    ByteKey,
    Key,
    KeyDecoder,
    SpecialKey,
    decode_all,
)

from .virtual_terminal import VirtualTerminal


def make_decoder(data: bytes = b"") -> tuple[KeyDecoder, VirtualTerminal]:
    term = VirtualTerminal()
    term.feed(data)
    return KeyDecoder(term.read), term


# ---------------------------------------------------------------------------
# Key helper class
# ---------------------------------------------------------------------------


class TestKeyConstants:
    """Key exposes one constant per named key."""

    def test_arrow_keys(self) -> None:
        assert Key.up == SpecialKey("up")
        assert Key.down == SpecialKey("down")
        assert Key.left == SpecialKey("left")
        assert Key.right == SpecialKey("right")

    def test_paging_keys(self) -> None:
        assert Key.page_up == SpecialKey("pageUp")
        assert Key.page_down == SpecialKey("pageDown")

    def test_ctrl_masks_to_control_byte(self) -> None:
        assert Key.ctrl("q") == ByteKey(0x11)
        assert Key.ctrl("a") == ByteKey(0x01)

    def test_byte_and_special_keys_never_compare_equal(self) -> None:
        assert ByteKey(0x1B) != Key.escape
        assert ByteKey(ord("A")) != Key.up


# ---------------------------------------------------------------------------
# Literal bytes
# ---------------------------------------------------------------------------


class TestLiteralBytes:
    def test_printable_byte(self) -> None:
        decoder, _ = make_decoder(b"x")
        assert decoder.read_key() == ByteKey(ord("x"))

    def test_control_byte(self) -> None:
        decoder, _ = make_decoder(b"\x11")
        assert decoder.read_key() == Key.ctrl("q")

    def test_high_byte_is_literal(self) -> None:
        decoder, _ = make_decoder(b"\xe9")
        assert decoder.read_key() == ByteKey(0xE9)

    def test_consumes_one_byte(self) -> None:
        decoder, term = make_decoder(b"ab")
        decoder.read_key()
        assert term.pending == b"b"

    def test_timeouts_before_first_byte_are_retried(self) -> None:
        term = VirtualTerminal()
        term.feed_timeout(5)
        term.feed(b"z")
        decoder = KeyDecoder(term.read)
        assert decoder.read_key() == ByteKey(ord("z"))
        assert term.timeouts == 5


# ---------------------------------------------------------------------------
# Escape sequences
# ---------------------------------------------------------------------------


class TestCsiTildeSequences:
    """ESC [ <digit> ~ maps the digit and consumes four bytes."""

    @pytest.mark.parametrize(
        ("digit", "expected"),
        [
            ("1", Key.home),
            ("3", Key.delete),
            ("4", Key.end),
            ("5", Key.page_up),
            ("6", Key.page_down),
            ("7", Key.home),
            ("8", Key.end),
        ],
    )
    def test_mapped_digit(self, digit: str, expected: SpecialKey) -> None:
        decoder, term = make_decoder(b"\x1b[" + digit.encode() + b"~rest")
        assert decoder.read_key() == expected
        assert term.pending == b"rest"

    @pytest.mark.parametrize("digit", ["0", "2", "9"])
    def test_unmapped_digit_is_escape(self, digit: str) -> None:
        decoder, term = make_decoder(b"\x1b[" + digit.encode() + b"~")
        assert decoder.read_key() == Key.escape
        assert term.pending == b""

    def test_digit_without_tilde_is_escape(self) -> None:
        decoder, term = make_decoder(b"\x1b[5Xq")
        assert decoder.read_key() == Key.escape
        assert term.pending == b"q"

    def test_timeout_after_digit_is_escape(self) -> None:
        term = VirtualTerminal()
        term.feed(b"\x1b[5")
        term.feed_timeout()
        term.feed(b"~")
        decoder = KeyDecoder(term.read)
        assert decoder.read_key() == Key.escape
        assert decoder.read_key() == ByteKey(ord("~"))

    def test_table_covers_documented_digits(self) -> None:
        assert sorted(chr(c) for c in CSI_TILDE_KEYS) == ["1", "3", "4", "5", "6", "7", "8"]


class TestCsiLetterSequences:
    """ESC [ <letter> maps arrows/Home/End and consumes three bytes."""

    @pytest.mark.parametrize(
        ("letter", "expected"),
        [
            ("A", Key.up),
            ("B", Key.down),
            ("C", Key.right),
            ("D", Key.left),
            ("H", Key.home),
            ("F", Key.end),
        ],
    )
    def test_mapped_letter(self, letter: str, expected: SpecialKey) -> None:
        decoder, term = make_decoder(b"\x1b[" + letter.encode() + b"!")
        assert decoder.read_key() == expected
        assert term.pending == b"!"

    def test_unknown_letter_is_escape(self) -> None:
        decoder, term = make_decoder(b"\x1b[Zx")
        assert decoder.read_key() == Key.escape
        assert term.pending == b"x"

    def test_table_has_six_entries(self) -> None:
        assert len(CSI_LETTER_KEYS) == 6


class TestSs3Sequences:
    def test_home(self) -> None:
        decoder, _ = make_decoder(b"\x1bOH")
        assert decoder.read_key() == Key.home

    def test_end(self) -> None:
        decoder, _ = make_decoder(b"\x1bOF")
        assert decoder.read_key() == Key.end

    def test_ss3_arrow_is_not_mapped(self) -> None:
        decoder, _ = make_decoder(b"\x1bOA")
        assert decoder.read_key() == Key.escape

    def test_table_contents(self) -> None:
        assert SS3_KEYS == {ord("H"): Key.home, ord("F"): Key.end}


class TestLoneEscape:
    """A lone ESC followed by an idle timeout is the Escape key."""

    def test_escape_then_timeout(self) -> None:
        term = VirtualTerminal()
        term.feed(b"\x1b")
        term.feed_timeout()
        term.feed(b"j")
        decoder = KeyDecoder(term.read)
        assert decoder.read_key() == Key.escape
        assert decoder.read_key() == ByteKey(ord("j"))

    def test_escape_bracket_then_timeout(self) -> None:
        term = VirtualTerminal()
        term.feed(b"\x1b[")
        term.feed_timeout()
        term.feed(b"A")
        decoder = KeyDecoder(term.read)
        assert decoder.read_key() == Key.escape
        assert decoder.read_key() == ByteKey(ord("A"))

    def test_unknown_introducer_is_escape(self) -> None:
        decoder, term = make_decoder(b"\x1bxyz")
        assert decoder.read_key() == Key.escape
        assert term.pending == b"z"


# ---------------------------------------------------------------------------
# decode_all
# ---------------------------------------------------------------------------


class TestDecodeAll:
    def test_mixed_stream(self) -> None:
        events = decode_all(b"a\x1b[A\x1b[6~\x1bOF\x11")
        assert events == [
            ByteKey(ord("a")),
            Key.up,
            Key.page_down,
            Key.end,
            Key.ctrl("q"),
        ]

    def test_trailing_escape_is_escape_key(self) -> None:
        assert decode_all(b"q\x1b") == [ByteKey(ord("q")), Key.escape]

    def test_empty_input(self) -> None:
        assert decode_all(b"") == []
