"""Command line entry point: load an ELF executable and run it."""

import argparse

from rvsim.cpu import run_program
from rvsim.elf import ElfError, load_elf
from rvsim.memory import Memory, SegmentationFault


def main(argv: list[str] | None = None) -> int:
    """Run the simulator; return the process exit status."""
    parser = argparse.ArgumentParser(prog="rvsim", description="Run an RV32 ELF executable.")
    parser.add_argument("executable", help="ELF32 file to load and run")
    parser.add_argument("-q", "--quiet", action="store_true", help="do not print the execution trace")
    args = parser.parse_args(argv)

    try:
        with open(args.executable, "rb") as handle:
            data = handle.read()
    except OSError:
        print(f"Error opening {args.executable}")
        return 1

    memory = Memory()
    try:
        header = load_elf(data, memory)
    except (ElfError, SegmentationFault) as exc:
        print(f"Error loading {args.executable}: {exc}")
        return 1

    if not args.quiet:
        print(f"init_pc = 0x{header.entry:x}")
    run_program(header.entry, memory, None if args.quiet else print)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())