"""CHIP-8 instruction decoding."""

from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


_ALU_MNEMONICS = {
    0x0: "LD V{x:X}, V{y:X}",
    0x1: "OR V{x:X}, V{y:X}",
    0x2: "AND V{x:X}, V{y:X}",
    0x3: "XOR V{x:X}, V{y:X}",
    0x4: "ADD V{x:X}, V{y:X}",
    0x5: "SUB V{x:X}, V{y:X}",
    0x6: "SHR V{x:X}",
    0x7: "SUBN V{x:X}, V{y:X}",
    0xE: "SHL V{x:X}",
}

_MISC_MNEMONICS = {
    0x07: "LD V{x:X}, DT",
    0x0A: "LD V{x:X}, K",
    0x15: "LD DT, V{x:X}",
    0x18: "LD ST, V{x:X}",
    0x1E: "ADD I, V{x:X}",
    0x29: "LD F, V{x:X}",
    0x33: "LD B, V{x:X}",
    0x55: "LD [I], V{x:X}",
    0x65: "LD V{x:X}, [I]",
}


def disassemble(instruction: int) -> str:
    """Render a 16-bit instruction as ``"XXXX  MNEMONIC"`` for trace output.

    Words that match no opcode render as ``DW`` data.
    """
    instruction = int(instruction) & 0xFFFF
    d = decode(instruction)
    operands = dict(x=d.x, y=d.y, n=d.n, nn=d.nn, nnn=d.nnn)

    if instruction == 0x00E0:
        text = "CLS"
    elif instruction == 0x00EE:
        text = "RET"
    elif d.opcode == 0x1:
        text = "JP {nnn:03X}"
    elif d.opcode == 0x2:
        text = "CALL {nnn:03X}"
    elif d.opcode == 0x3:
        text = "SE V{x:X}, {nn:02X}"
    elif d.opcode == 0x4:
        text = "SNE V{x:X}, {nn:02X}"
    elif d.opcode == 0x5:
        text = "SE V{x:X}, V{y:X}"
    elif d.opcode == 0x6:
        text = "LD V{x:X}, {nn:02X}"
    elif d.opcode == 0x7:
        text = "ADD V{x:X}, {nn:02X}"
    elif d.opcode == 0x8 and d.n in _ALU_MNEMONICS:
        text = _ALU_MNEMONICS[d.n]
    elif d.opcode == 0x9:
        text = "SNE V{x:X}, V{y:X}"
    elif d.opcode == 0xA:
        text = "LD I, {nnn:03X}"
    elif d.opcode == 0xB:
        text = "JP V0, {nnn:03X}"
    elif d.opcode == 0xC:
        text = "RND V{x:X}, {nn:02X}"
    elif d.opcode == 0xD:
        text = "DRW V{x:X}, V{y:X}, {n:X}"
    elif d.opcode == 0xE and d.nn == 0x9E:
        text = "SKP V{x:X}"
    elif d.opcode == 0xE and d.nn == 0xA1:
        text = "SKNP V{x:X}"
    elif d.opcode == 0xF and d.nn in _MISC_MNEMONICS:
        text = _MISC_MNEMONICS[d.nn]
    else:
        text = "DW {raw:04X}"
        operands["raw"] = instruction

    return f"{instruction:04X}  " + text.format(**operands)
