"""Byte-lane data memory and word-indexed instruction memory.

Data is held in four byte banks, one per byte lane of a 32-bit word, so that
``bank[n][addr >> 2]`` is byte ``addr`` when ``addr & 3 == n``.  Instruction
memory is separate: it is filled only by loading segments and is indexed by
the byte address of the program counter.
"""

import itertools

MEM_SIZE = 1 << 24
_MASK32 = 0xFFFFFFFF


class UnalignedAccessError(Exception):
    """A halfword or word access that is not naturally aligned."""

    def __init__(self, addr: int) -> None:
        self.addr = addr
        super().__init__(f"unaligned memory access at 0x{addr:x}")


class SegmentationFault(Exception):
    """An access outside the simulated memory."""

    def __init__(self, addr: int) -> None:
        self.addr = addr
        super().__init__(f"invalid memory access 0x{addr:x}")


class Memory:
    """Simulated memory of ``size`` bytes."""

    def __init__(self, size: int = MEM_SIZE) -> None:
        if size <= 0 or size % 4:
            raise ValueError(f"memory size must be a positive multiple of 4, got {size!r}")
        self.size = size
        self._words = size // 4
        self._banks = tuple(bytearray(self._words) for _ in range(4))
        self._instructions: dict[int, int] = {}

    def _read_index(self, addr: int) -> int:
        base = addr >> 2
        return base if base < self._words else 0

    def _write_index(self, addr: int) -> int:
        base = addr >> 2
        if base >= self._words:
            raise SegmentationFault(addr)
        return base

    def fetch(self, pc: int) -> int:
        """The instruction word stored at ``pc``; out-of-range reads use index 0."""
        pc &= _MASK32
        return self._instructions.get(pc if pc < self._words else 0, 0)

    def read_byte(self, addr: int) -> int:
        """Unsigned byte at ``addr``."""
        addr &= _MASK32
        return self._banks[addr & 3][self._read_index(addr)]

    def write_byte(self, addr: int, value: int) -> None:
        """Store the low 8 bits of ``value`` at ``addr``."""
        addr &= _MASK32
        self._banks[addr & 3][self._write_index(addr)] = value & 0xFF

    def read_half(self, addr: int) -> int:
        """Unsigned little-endian halfword at a 2-byte aligned ``addr``."""
        addr &= _MASK32
        lane = addr & 3
        if lane not in (0, 2):
            raise UnalignedAccessError(addr)
        base = self._read_index(addr)
        return self._banks[lane][base] | (self._banks[lane + 1][base] << 8)

    def write_half(self, addr: int, value: int) -> None:
        """Store the low 16 bits of ``value`` at a 2-byte aligned ``addr``."""
        addr &= _MASK32
        lane = addr & 3
        if lane not in (0, 2):
            raise UnalignedAccessError(addr)
        base = self._write_index(addr)
        self._banks[lane][base] = value & 0xFF
        self._banks[lane + 1][base] = (value >> 8) & 0xFF

    def read_word(self, addr: int) -> int:
        """Unsigned little-endian word at a 4-byte aligned ``addr``."""
        addr &= _MASK32
        if addr & 3:
            raise UnalignedAccessError(addr)
        base = self._read_index(addr)
        return int.from_bytes(bytes(bank[base] for bank in self._banks), "little")

    def write_word(self, addr: int, value: int) -> None:
        """Store the low 32 bits of ``value`` at a 4-byte aligned ``addr``."""
        addr &= _MASK32
        if addr & 3:
            raise UnalignedAccessError(addr)
        base = self._write_index(addr)
        for bank, byte in zip(self._banks, (value & _MASK32).to_bytes(4, "little")):
            bank[base] = byte

    def load_segment(self, vaddr: int, data: bytes, memsz: int) -> None:
        """Copy ``data`` to ``vaddr`` and zero-fill up to ``memsz`` bytes.

        The bytes go both to data memory and to instruction memory.
        """
        data = bytes(data)
        total = max(len(data), memsz)
        padded = itertools.chain(data, itertools.repeat(0, total - len(data)))
        first_base = vaddr >> 2
        for offset, byte in enumerate(padded):
            word, lane = divmod(offset, 4)
            base = first_base + word
            if base >= self._words:
                raise SegmentationFault(vaddr + offset)
            self._banks[lane][base] = byte
            index = vaddr + 4 * word
            if index < self._words:
                shift = 8 * lane
                current = self._instructions.get(index, 0)
                self._instructions[index] = (current & ~(0xFF << shift) & _MASK32) | (byte << shift)