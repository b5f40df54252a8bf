import pytest

from omodscan.ansi import printable_ansi, uint16_from_ansi, uint16_to_ansi
from omodscan.byteorder import ByteOrder


def test_uint16_to_ansi_high_byte_first():
    assert uint16_to_ansi(0x4142) == b"AB"


@pytest.mark.parametrize("order", list(ByteOrder))
@pytest.mark.parametrize("value", [0, 0x4142, 0xFF01, 0xFFFF])
def test_round_trip(value, order):
    assert uint16_from_ansi(uint16_to_ansi(value, order), order) == value


@pytest.mark.parametrize("data", [b"", b"A", b"ABC"])
def test_from_ansi_wrong_length_is_zero(data):
    assert uint16_from_ansi(data) == 0


def test_control_bytes_become_question_marks():
    assert printable_ansi(b"A\x01B", "latin-1") == "A?B"


def test_separator_follows_every_byte():
    result = printable_ansi(b"ABC", "latin-1", ",")
    assert len(result) == 6
    assert result[1::2] == ",,,"


def test_unprintable_separator_is_ignored():
    assert printable_ansi(b"AB", "latin-1", "\n") == printable_ansi(b"AB", "latin-1")


def test_codepage_is_used():
    assert printable_ansi(b"\xc0", "windows-1251") == "\u0410"


def test_unknown_codepage_falls_back():
    assert printable_ansi(b"AB", "no-such-codepage") == "AB"