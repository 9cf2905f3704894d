# rvsim

A small simulator for 32-bit RISC-V programs. It loads a statically linked,
little-endian ELF32 executable into a 16 MiB memory, starts at the ELF entry
point and runs the RV32I base integer instructions, plus `flw`, `fsw`,
`fadd.s` and `fsub.s`. The floating-point additions are rounded and flagged
in software, following IEEE 754 binary32, with the rounding mode taken from
the `frm` field of `fcsr`.

The stack pointer (`x2`) starts at the top of memory minus 4.

## Installing

```
pip install .
```

## Running a program

```
rvsim program.elf
rvsim --quiet program.elf
```

The simulator prints `init_pc = 0x...` and then, for every executed
instruction, a `TRACE:` line with the program counter, the raw instruction
word and its opcode, followed by a disassembly line with the values of the
source registers. `-q` / `--quiet` turns all of this output off.

The command exits with status 1 if the file cannot be opened or its segments
cannot be loaded, and 0 once the program has stopped.

## When a program stops

- `ecall` ends the program.
- An unknown major opcode, an unaligned half-word or word load or store, a
  store or `flw` outside memory, or an `OP-FP` instruction other than
  `fadd.s` / `fsub.s` stops the simulation.
- An instruction with a known major opcode but an unknown minor field is
  skipped over without effect and without advancing the program counter, so
  the simulator keeps executing it; use `Cpu.run(max_steps=...)` to bound such
  runs.
- Loads and instruction fetches outside memory read from address 0 instead.

## Using it from Python

```python
from rvsim.cpu import Cpu
from rvsim.elf import load_elf
from rvsim.memory import Memory

memory = Memory()
with open("program.elf", "rb") as handle:
    header = load_elf(handle.read(), memory)

cpu = Cpu(memory, header.entry, trace=print)
reason = cpu.run(max_steps=100_000)   # a HaltReason, or None if steps ran out
print(reason, hex(cpu.pc), cpu.x[10], cpu.fflags)
```

`run_program(entry, memory, trace)` builds a `Cpu`, runs it until it halts
and returns it. `Cpu.step()` executes a single instruction. The core's state
is in `pc`, `x` (integer registers), `f` (floating-point registers as raw
bit patterns), `fcsr`, `steps` and `halt_reason`.

`Memory` offers `read_byte`, `read_half`, `read_word`, their `write_*`
counterparts, `fetch` and `load_segment`; misaligned accesses raise
`UnalignedAccessError` and writes outside memory raise `SegmentationFault`.

The floating-point routines work on 32-bit patterns and can be used on their
own:

```python
from rvsim.softfloat import RoundingMode, f32_add

result = f32_add(0x3F800000, 0x40000000, RoundingMode.NEAR_EVEN)
print(hex(result.bits), result.value, result.flags)   # 0x40400000 3.0 ExceptionFlag(0)
```

Modules:

- `rvsim.memory`: byte-banked data memory and instruction memory
- `rvsim.elf`: ELF32 header and program-header parsing, segment loading
- `rvsim.decode`: instruction fields and immediates
- `rvsim.cpu`: the core and its execution loop
- `rvsim.cli`: the `rvsim` command
- `rvsim.softfloat`: single-precision add and subtract with exception flags
- `rvsim.jam`, `rvsim.wide`, `rvsim.wide_arith`: shift-with-jam, leading-zero
  counts and 128-bit integer helpers

## What it does not do

There is no multiply/divide extension, no compressed instructions, no CSR
instructions, no system calls other than `ecall` as exit, and of the
single-precision extension only `flw`, `fsw`, `fadd.s` and `fsub.s`.
Only 32-bit little-endian ELF files are read.

## Tests

```
pip install ".[test]"
pytest
```