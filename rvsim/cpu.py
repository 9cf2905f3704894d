"""An RV32I core with single-precision load, store, add and subtract."""

import enum
import struct
from collections.abc import Callable

from rvsim.decode import Instruction, Opcode, decode
from rvsim.memory import Memory, SegmentationFault, UnalignedAccessError
from rvsim.softfloat import ExceptionFlag, f32_add, f32_sub, rounding_mode_from_frm

REGISTER_SP = 2
_MASK32 = 0xFFFFFFFF
_FFLAGS_MASK = 0x1F

TraceFn = Callable[[str], None]


class HaltReason(enum.Enum):
    """Why the core stopped."""

    ECALL = "ecall"
    UNDEFINED_INSTRUCTION = "undefined instruction"
    UNALIGNED_ACCESS = "unaligned memory access"
    SEGMENTATION_FAULT = "segmentation fault"
    UNSUPPORTED_FP_OPERATION = "unsupported floating-point operation"


def _signed(value: int) -> int:
    return value - (1 << 32) if value & 0x80000000 else value


def _sign_extend(value: int, bits: int) -> int:
    if value & (1 << (bits - 1)):
        return (value | (_MASK32 ^ ((1 << bits) - 1))) & _MASK32
    return value


def _as_float(bits: int) -> float:
    return struct.unpack("<f", struct.pack("<I", bits))[0]


_ALU: dict[str, Callable[[int, int], int]] = {
    "add": lambda a, b: a + b,
    "sub": lambda a, b: a - b,
    "sll": lambda a, b: a << (b & 31),
    "slt": lambda a, b: int(_signed(a) < _signed(b)),
    "sltu": lambda a, b: int(a < b),
    "xor": lambda a, b: a ^ b,
    "srl": lambda a, b: a >> (b & 31),
    "sra": lambda a, b: _signed(a) >> (b & 31),
    "or": lambda a, b: a | b,
    "and": lambda a, b: a & b,
}

_IMM_NAMES = {0: "add", 1: "sll", 2: "slt", 3: "sltu", 4: "xor", 6: "or", 7: "and"}
_OP_NAMES = {1: "sll", 2: "slt", 3: "sltu", 4: "xor", 6: "or", 7: "and"}
_SHIFT_SPLIT = {0b0000000: "srl", 0b0100000: "sra"}
_ADD_SPLIT = {0b0000000: "add", 0b0100000: "sub"}

_BRANCHES: dict[int, tuple[str, Callable[[int, int], bool]]] = {
    0b000: ("beq", lambda a, b: a == b),
    0b001: ("bne", lambda a, b: a != b),
    0b100: ("blt", lambda a, b: _signed(a) < _signed(b)),
    0b101: ("bge", lambda a, b: _signed(a) >= _signed(b)),
    0b110: ("bltu", lambda a, b: a < b),
    0b111: ("bgeu", lambda a, b: a >= b),
}

_LOAD_NAMES = {0b000: "lb", 0b001: "lh", 0b010: "lw", 0b100: "lbu", 0b101: "lhu"}

_STORES: dict[int, tuple[str, Callable[[Memory, int, int], None]]] = {
    0b000: ("sb", Memory.write_byte),
    0b001: ("sh", Memory.write_half),
    0b010: ("sw", Memory.write_word),
}

_FP_OPS = {0b0000000: ("fadd.s", f32_add), 0b0000100: ("fsub.s", f32_sub)}
_FUNCT3_WIDTH_WORD = 0b010


class Cpu:
    """Architectural state of one hart and the loop that executes it.

    Instructions whose minor fields name no known operation leave the state
    untouched, so the core keeps executing them.
    """

    def __init__(self, memory: Memory, entry: int = 0, trace: TraceFn | None = None) -> None:
        self.memory = memory
        self.pc = entry & _MASK32
        self.x = [0] * 32
        self.x[REGISTER_SP] = memory.size - 4
        self.f = [0] * 32
        self.fcsr = 0
        self.halt_reason: HaltReason | None = None
        self.steps = 0
        self._trace = trace
        self._handlers: dict[int, Callable[[Instruction], None]] = {
            Opcode.LUI: self._lui,
            Opcode.AUIPC: self._auipc,
            Opcode.OP_IMM: self._op_imm,
            Opcode.OP: self._op,
            Opcode.FENCE: self._fence,
            Opcode.SYSTEM: self._ecall,
            Opcode.LOAD: self._load,
            Opcode.STORE: self._store,
            Opcode.JAL: self._jal,
            Opcode.JALR: self._jalr,
            Opcode.BRANCH: self._branch,
            Opcode.LOAD_FP: self._load_fp,
            Opcode.STORE_FP: self._store_fp,
            Opcode.OP_FP: self._op_fp,
        }

    @property
    def halted(self) -> bool:
        return self.halt_reason is not None

    @property
    def fflags(self) -> ExceptionFlag:
        """The accrued floating-point exception flags."""
        return ExceptionFlag(self.fcsr & _FFLAGS_MASK)

    def step(self) -> HaltReason | None:
        """Execute one instruction; return the halt reason once the core stops."""
        if self.halt_reason is not None:
            return self.halt_reason
        word = self.memory.fetch(self.pc)
        ins = decode(word)
        self._emit(f"TRACE: pc=0x{self.pc:x} ; instr=0x{word:x} ; opcode=0x{ins.opcode:x}")
        handler = self._handlers.get(ins.opcode)
        if handler is None:
            self._halt(HaltReason.UNDEFINED_INSTRUCTION, "Error: undefined instruction.")
        else:
            try:
                handler(ins)
            except SegmentationFault as exc:
                self._halt(
                    HaltReason.SEGMENTATION_FAULT,
                    f"Segmentation fault: invalid memory access 0x{exc.addr:x} at pc=0x{self.pc:x}",
                )
        self.steps += 1
        return self.halt_reason

    def run(self, max_steps: int | None = None) -> HaltReason | None:
        """Run until the core halts; return None if ``max_steps`` ran out first."""
        executed = 0
        while self.halt_reason is None:
            if max_steps is not None and executed >= max_steps:
                return None
            self.step()
            executed += 1
        return self.halt_reason

    def _emit(self, text: str) -> None:
        if self._trace is not None:
            self._trace(text)

    def _halt(self, reason: HaltReason, message: str) -> None:
        self._emit(message)
        self.halt_reason = reason

    def _set(self, rd: int, value: int) -> None:
        if rd != 0:
            self.x[rd] = value & _MASK32

    def _advance(self) -> None:
        self.pc = (self.pc + 4) & _MASK32

    def _lui(self, ins: Instruction) -> None:
        self._emit(f"pc=0x{self.pc:x}; lui {ins.rd}, 0x{ins.imm_u:x}")
        self._set(ins.rd, ins.imm_u)
        self._advance()

    def _auipc(self, ins: Instruction) -> None:
        self._emit(f"pc=0x{self.pc:x}; auipc {ins.rd}, 0x{ins.imm_u:x}")
        self._set(ins.rd, self.pc + ins.imm_u)
        self._advance()

    def _op_imm(self, ins: Instruction) -> None:
        if ins.funct3 == 0b101:
            name = _SHIFT_SPLIT.get(ins.funct7)
        else:
            name = _IMM_NAMES[ins.funct3]
        if name is None:
            return
        shift = name in ("sll", "srl", "sra")
        operand = ins.shamt if shift else ins.simm_i
        shown = str(ins.shamt) if shift else f"0x{ins.imm_i:x}"
        self._emit(
            f"pc=0x{self.pc:x}; {name}i {ins.rd}, {ins.rs1}, {shown}; "
            f"x[rs1]={_signed(self.x[ins.rs1])}"
        )
        self._set(ins.rd, _ALU[name](self.x[ins.rs1], operand))
        self._advance()

    def _op(self, ins: Instruction) -> None:
        if ins.funct3 == 0b000:
            name = _ADD_SPLIT.get(ins.funct7)
        elif ins.funct3 == 0b101:
            name = _SHIFT_SPLIT.get(ins.funct7)
        else:
            name = _OP_NAMES[ins.funct3]
        if name is None:
            return
        a, b = self.x[ins.rs1], self.x[ins.rs2]
        self._emit(
            f"pc=0x{self.pc:x}; {name} {ins.rd}, {ins.rs1}, {ins.rs2}; "
            f"x[rs1]={_signed(a)}; x[rs2]={_signed(b)}"
        )
        self._set(ins.rd, _ALU[name](a, b))
        self._advance()

    def _fence(self, ins: Instruction) -> None:
        self._emit(f"pc=0x{self.pc:x}; fence")
        self._advance()

    def _ecall(self, ins: Instruction) -> None:
        self._halt(HaltReason.ECALL, f"pc=0x{self.pc:x}; ecall [handled as exit].")

    def _load(self, ins: Instruction) -> None:
        name = _LOAD_NAMES.get(ins.funct3)
        if name is None:
            return
        self._emit(
            f"pc=0x{self.pc:x}; {name} {ins.rd}, 0x{ins.imm_i:x}({ins.rs1}); "
            f"x[rs1]={_signed(self.x[ins.rs1])}"
        )
        addr = (self.x[ins.rs1] + ins.simm_i) & _MASK32
        try:
            if name in ("lb", "lbu"):
                value = self.memory.read_byte(addr)
            elif name in ("lh", "lhu"):
                value = self.memory.read_half(addr)
            else:
                value = self.memory.read_word(addr)
        except UnalignedAccessError:
            value = 0
            self._halt(HaltReason.UNALIGNED_ACCESS, "Error: Unaligned memory access.")
        if name == "lb":
            value = _sign_extend(value, 8)
        elif name == "lh":
            value = _sign_extend(value, 16)
        self._set(ins.rd, value)
        self._advance()

    def _store(self, ins: Instruction) -> None:
        entry = _STORES.get(ins.funct3)
        if entry is None:
            return
        name, write = entry
        self._emit(
            f"pc=0x{self.pc:x}; {name} {ins.rs2}, 0x{ins.imm_s:x}({ins.rs1}); "
            f"x[rs1]={_signed(self.x[ins.rs1])}; x[rs2]={_signed(self.x[ins.rs2])}"
        )
        addr = (self.x[ins.rs1] + ins.simm_s) & _MASK32
        try:
            write(self.memory, addr, self.x[ins.rs2])
        except UnalignedAccessError:
            self._halt(HaltReason.UNALIGNED_ACCESS, "Error: Unaligned memory access.")
        self._advance()

    def _jal(self, ins: Instruction) -> None:
        self._emit(f"pc=0x{self.pc:x}; jal {ins.rd}, 0x{ins.imm_j:x}")
        self._set(ins.rd, self.pc + 4)
        self.pc = (self.pc + ins.simm_j) & _MASK32

    def _jalr(self, ins: Instruction) -> None:
        self._emit(
            f"pc=0x{self.pc:x}; jalr {ins.rd}, {ins.rs1}, 0x{ins.imm_i:x}; "
            f"x[rs1]={_signed(self.x[ins.rs1])}"
        )
        link = self.pc + 4
        self.pc = (self.x[ins.rs1] + ins.simm_i) & _MASK32
        self._set(ins.rd, link)

    def _branch(self, ins: Instruction) -> None:
        entry = _BRANCHES.get(ins.funct3)
        if entry is None:
            return
        name, taken = entry
        a, b = self.x[ins.rs1], self.x[ins.rs2]
        self._emit(
            f"pc=0x{self.pc:x}; {name} {ins.rs1}, {ins.rs2}, 0x{ins.imm_b:x}; "
            f"x[rs1]={_signed(a)}; x[rs2]={_signed(b)}"
        )
        if taken(a, b):
            self.pc = (self.pc + ins.simm_b) & _MASK32
        else:
            self._advance()

    def _load_fp(self, ins: Instruction) -> None:
        if ins.funct3 != _FUNCT3_WIDTH_WORD:
            return
        addr = (self.x[ins.rs1] + ins.simm_i) & _MASK32
        if not addr & 3:
            if addr >> 2 >= self.memory.size // 4:
                raise SegmentationFault(addr)
            self.f[ins.rd] = self.memory.read_word(addr)
        self._emit(
            f"pc=0x{self.pc:x}; flw {ins.rd}, {_signed(ins.simm_i)}({ins.rs1}); "
            f"f[{ins.rd}] = {_as_float(self.f[ins.rd]):f}"
        )
        self._advance()

    def _store_fp(self, ins: Instruction) -> None:
        if ins.funct3 != _FUNCT3_WIDTH_WORD:
            return
        addr = (self.x[ins.rs1] + ins.simm_s) & _MASK32
        self.memory.write_word(addr & ~3 & _MASK32, self.f[ins.rs2])
        self._emit(
            f"pc=0x{self.pc:x}; fsw {ins.rs2}, {_signed(ins.simm_s)}({ins.rs1}); "
            f"f[{ins.rs2}] = {_as_float(self.f[ins.rs2]):f}"
        )
        self._advance()

    def _op_fp(self, ins: Instruction) -> None:
        mode = rounding_mode_from_frm((self.fcsr >> 5) & 0b111)
        entry = _FP_OPS.get(ins.funct7)
        if entry is None or ins.funct3 not in (0b000, 0b111):
            self._halt(
                HaltReason.UNSUPPORTED_FP_OPERATION,
                f"unrecognised OP_FP instruction: funct7=0x{ins.funct7:x}, funct3=0x{ins.funct3:x}",
            )
            return
        name, operation = entry
        result = operation(self.f[ins.rs1], self.f[ins.rs2], mode)
        if ins.rd != 0:
            self.f[ins.rd] = result.bits
        self.fcsr = (self.fcsr & ~_FFLAGS_MASK) | (int(result.flags) & _FFLAGS_MASK)
        flag_names = ", ".join(flag.name for flag in ExceptionFlag if flag in result.flags)
        self._emit(
            f"pc=0x{self.pc:x}; {name} f{ins.rd}, f{ins.rs1}, f{ins.rs2} = "
            f"{_as_float(result.bits):f}; fflags=0x{self.fcsr & _FFLAGS_MASK:02X} {flag_names}".rstrip()
        )
        self._advance()


def run_program(entry: int, memory: Memory, trace: TraceFn | None = None) -> Cpu:
    """Run the program in ``memory`` from ``entry`` until it halts; return the core."""
    cpu = Cpu(memory, entry, trace)
    cpu.run()
    return cpu