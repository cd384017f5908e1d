"""Tests for instruction decoding and disassembly."""

import pytest
from chix8 import decode, disassemble


def test_decode_fields():
    d = decode(0xD12F)
    assert d.opcode == 0xD
    assert d.x == 0x1
    assert d.y == 0x2
    assert d.n == 0xF
    assert d.nn == 0x2F
    assert d.nnn == 0x12F
    assert d.raw == 0xD12F


def test_decode_is_frozen():
    d = decode(0x1234)
    with pytest.raises(Exception):
        d.opcode = 0


class TestDisassemble:
    """Mnemonics used in debug traces."""

    @pytest.mark.parametrize("instruction,text", [
        (0x00E0, "00E0  CLS"),
        (0x00EE, "00EE  RET"),
        (0x1ABC, "1ABC  JP ABC"),
        (0x2300, "2300  CALL 300"),
        (0x3A42, "3A42  SE VA, 42"),
        (0x4B01, "4B01  SNE VB, 01"),
        (0x5120, "5120  SE V1, V2"),
        (0x6005, "6005  LD V0, 05"),
        (0x7F10, "7F10  ADD VF, 10"),
        (0x8124, "8124  ADD V1, V2"),
        (0x8127, "8127  SUBN V1, V2"),
        (0x834E, "834E  SHL V3"),
        (0x9780, "9780  SNE V7, V8"),
        (0xA123, "A123  LD I, 123"),
        (0xB250, "B250  JP V0, 250"),
        (0xC20F, "C20F  RND V2, 0F"),
        (0xD015, "D015  DRW V0, V1, 5"),
        (0xE09E, "E09E  SKP V0"),
        (0xE5A1, "E5A1  SKNP V5"),
        (0xF30A, "F30A  LD V3, K"),
        (0xF233, "F233  LD B, V2"),
        (0xFF55, "FF55  LD [I], VF"),
    ])
    def test_known_instructions(self, instruction, text):
        assert disassemble(instruction) == text

    @pytest.mark.parametrize("instruction", [0x0000, 0x0123, 0x8008, 0xE000, 0xF0FF])
    def test_unknown_words_are_data(self, instruction):
        assert disassemble(instruction) == f"{instruction:04X}  DW {instruction:04X}"
