"""A small RV32I simulator with single-precision add and subtract that runs ELF32 programs."""

__version__ = "0.1.0"