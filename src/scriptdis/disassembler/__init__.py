"""
scriptdis Disassembler Module
=============================

This module provides the disassembler contract and the engine plug-ins:
- Disassembler: abstract base class with the open/decode/render lifecycle
- ScummV6Disassembler: SCUMM v6 script bytecode

Usage:
    from scriptdis.disassembler import ScummV6Disassembler

    disasm = ScummV6Disassembler()
    disasm.open("script.bin")
    instructions = disasm.decode()
    disasm.render(sys.stdout)

Copyright (c) 2025-2026 scriptdis Contributors
"""

from .base import Disassembler, DisassemblerState
from .reader import ByteCursor
from .scummv6 import ScummV6Disassembler

__all__ = [
    "Disassembler",
    "DisassemblerState",
    "ByteCursor",
    "ScummV6Disassembler",
]
