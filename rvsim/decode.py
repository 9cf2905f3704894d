"""Splitting 32-bit RISC-V instruction words into their fields."""

import enum
from dataclasses import dataclass

_MASK32 = 0xFFFFFFFF
_SIGN = 0x80000000


class Opcode(enum.IntEnum):
    """Major opcodes understood by the simulator."""

    LOAD = 0b0000011
    LOAD_FP = 0b0000111
    FENCE = 0b0001111
    OP_IMM = 0b0010011
    AUIPC = 0b0010111
    STORE = 0b0100011
    STORE_FP = 0b0100111
    OP = 0b0110011
    LUI = 0b0110111
    OP_FP = 0b1010011
    BRANCH = 0b1100011
    JALR = 0b1100111
    JAL = 0b1101111
    SYSTEM = 0b1110011


@dataclass(frozen=True)
class Instruction:
    """Every field of an instruction word, decoded for all formats at once.

    The ``imm_*`` fields are the raw immediates; the ``simm_*`` properties
    are the same values sign-extended to 32 bits.
    """

    word: int
    opcode: int
    rd: int
    funct3: int
    rs1: int
    rs2: int
    funct7: int
    imm_i: int
    imm_s: int
    imm_u: int
    imm_j: int
    imm_b: int
    shamt: int

    @property
    def kind(self) -> Opcode | None:
        """The opcode as an ``Opcode``, or None if it is not one the simulator knows."""
        try:
            return Opcode(self.opcode)
        except ValueError:
            return None

    def _extend(self, fill: int, imm: int) -> int:
        return (fill if self.word & _SIGN else 0) | imm

    @property
    def simm_i(self) -> int:
        return self._extend(0xFFFFF000, self.imm_i)

    @property
    def simm_s(self) -> int:
        return self._extend(0xFFFFF000, self.imm_s)

    @property
    def simm_j(self) -> int:
        return self._extend(0xFFF00000, self.imm_j)

    @property
    def simm_b(self) -> int:
        return self._extend(0xFFFFF000, self.imm_b)


def decode(word: int) -> Instruction:
    """Decode a 32-bit instruction word."""
    if not 0 <= word <= _MASK32:
        raise ValueError(f"instruction must be a 32-bit word, got {word!r}")
    return Instruction(
        word=word,
        opcode=word & 0b1111111,
        rd=(word >> 7) & 0b11111,
        funct3=(word >> 12) & 0b111,
        rs1=(word >> 15) & 0b11111,
        rs2=(word >> 20) & 0b11111,
        funct7=word >> 25,
        imm_i=word >> 20,
        imm_s=((word >> 7) & 0b11111) | ((word >> 20) & 0b111111100000),
        imm_u=word & 0xFFFFF000,
        imm_j=((word >> 20) & 0x7FE)
        | ((word >> 9) & 0x800)
        | (word & 0xFF000)
        | ((word >> 11) & 0x100000),
        imm_b=((word >> 7) & 0x1E)
        | ((word >> 20) & 0x7E0)
        | ((word << 4) & 0x800)
        | ((word >> 19) & 0x1000),
        shamt=(word >> 20) & 0b11111,
    )