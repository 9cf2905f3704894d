"""Reading 32-bit little-endian ELF executables into simulated memory."""

import struct
from collections.abc import Iterator
from dataclasses import dataclass

from rvsim.memory import Memory

PT_LOAD = 1

_HEADER = struct.Struct("<16sHHIIIIIHHHHHH")
_PROGRAM_HEADER = struct.Struct("<8I")


class ElfError(ValueError):
    """The data is not a readable ELF32 image."""


@dataclass(frozen=True)
class ElfHeader:
    """The ELF32 file header."""

    ident: bytes
    type: int
    machine: int
    version: int
    entry: int
    phoff: int
    shoff: int
    flags: int
    ehsize: int
    phentsize: int
    phnum: int
    shentsize: int
    shnum: int
    shstrndx: int


@dataclass(frozen=True)
class ProgramHeader:
    """One ELF32 program header entry."""

    type: int
    offset: int
    vaddr: int
    paddr: int
    filesz: int
    memsz: int
    flags: int
    align: int


def parse_header(data: bytes) -> ElfHeader:
    """Decode the file header at the start of ``data``."""
    if len(data) < _HEADER.size:
        raise ElfError(f"file too short for an ELF header: {len(data)} bytes")
    return ElfHeader(*_HEADER.unpack_from(data, 0))


def program_headers(data: bytes, header: ElfHeader) -> Iterator[ProgramHeader]:
    """Yield the program headers described by ``header``."""
    for index in range(header.phnum):
        offset = header.phoff + index * header.phentsize
        if offset + _PROGRAM_HEADER.size > len(data):
            raise ElfError(f"program header {index} lies outside the file")
        yield ProgramHeader(*_PROGRAM_HEADER.unpack_from(data, offset))


def load_elf(data: bytes, memory: Memory) -> ElfHeader:
    """Load every PT_LOAD segment of ``data`` into ``memory``; return the header."""
    header = parse_header(data)
    for segment in program_headers(data, header):
        if segment.type != PT_LOAD:
            continue
        end = segment.offset + segment.filesz
        if end > len(data):
            raise ElfError(f"segment at 0x{segment.vaddr:x} lies outside the file")
        memory.load_segment(segment.vaddr, data[segment.offset:end], segment.memsz)
    return header