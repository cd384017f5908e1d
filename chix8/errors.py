"""Exceptions raised by the CHIP-8 engine."""

from chix8.constants import STACK_OVERFLOW, STACK_UNDERFLOW, UNKNOWN_OPCODE


class Chip8Error(Exception):
    """Base class for all engine errors."""


class LoadTooLargeError(Chip8Error, ValueError):
    """Program image does not fit between the program start and the end of memory."""

    def __init__(self, size: int, capacity: int):
        super().__init__(f"Program of {size} bytes exceeds the {capacity} bytes available")
        self.size = size
        self.capacity = capacity


class InvalidKeyError(Chip8Error, ValueError):
    """Key code outside the 16-key hexadecimal keypad."""


class MachineFault(Chip8Error):
    """An instruction halted the machine.

    Attributes:
        address: Address of the faulting instruction
        instruction: The faulting 16-bit instruction word
    """
    reason = "machine fault"

    def __init__(self, address: int, instruction: int):
        super().__init__(f"{self.reason} at 0x{address:03X} (instruction {instruction:04X})")
        self.address = address
        self.instruction = instruction


class StackOverflowError(MachineFault):
    reason = "Stack overflow"


class StackUnderflowError(MachineFault):
    reason = "Stack underflow"


class UnknownOpcodeError(MachineFault):
    reason = "Unknown opcode"


FAULT_ERRORS = {
    STACK_OVERFLOW: StackOverflowError,
    STACK_UNDERFLOW: StackUnderflowError,
    UNKNOWN_OPCODE: UnknownOpcodeError,
}
