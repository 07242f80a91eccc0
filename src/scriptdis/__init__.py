"""
scriptdis - Extensible Script Bytecode Disassembler
===================================================

This package decodes engine-specific script bytecode into a flat,
addressed sequence of instructions and renders it as a text listing.

Main Components
---------------
- **registry**: EngineRegistry mapping engine ids to disassembler factories
- **disassembler**: the Disassembler contract and the engine plug-ins
    - scummv6: SCUMM v6 script bytecode
- **instruction**: Instruction and Operand value records
- **cli**: the scriptdis command-line driver

Quick Start
-----------
    >>> from scriptdis import create_default_registry
    >>> registry = create_default_registry()
    >>> list(registry.list())
    [('scummv6', 'SCUMM v6')]
    >>> disasm = registry.create("scummv6")
    >>> disasm.open("script.bin")
    >>> instructions = disasm.decode()
    >>> disasm.render(sys.stdout)

Or use the command-line tool:
    $ scriptdis --list
    $ scriptdis -d -e scummv6 script.bin
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from scriptdis.config import DisassemblerConfig
from scriptdis.errors import (
    ScriptDisError,
    RegistryError,
    DuplicateEngineError,
    UnknownEngineError,
    SourceError,
    SourceNotFoundError,
    SourceUnreadableError,
    UsageError,
    AlreadyOpenError,
    NotReadyError,
    MalformedBytecodeError,
)
from scriptdis.instruction import Instruction, Operand, OperandKind
from scriptdis.disassembler import (
    Disassembler,
    DisassemblerState,
    ScummV6Disassembler,
)
from scriptdis.registry import EngineRegistry, EngineEntry, create_default_registry

__all__ = [
    # Version info
    "__version__",
    # Configuration
    "DisassemblerConfig",
    # Instruction model
    "Instruction",
    "Operand",
    "OperandKind",
    # Disassemblers
    "Disassembler",
    "DisassemblerState",
    "ScummV6Disassembler",
    # Registry
    "EngineRegistry",
    "EngineEntry",
    "create_default_registry",
    # Exception hierarchy
    "ScriptDisError",
    "RegistryError",
    "DuplicateEngineError",
    "UnknownEngineError",
    "SourceError",
    "SourceNotFoundError",
    "SourceUnreadableError",
    "UsageError",
    "AlreadyOpenError",
    "NotReadyError",
    "MalformedBytecodeError",
]
