"""
scriptdis Error Hierarchy
=========================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from ScriptDisError, allowing callers to catch all
disassembler-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
ScriptDisError (base)
├── RegistryError (engine registry)
│   ├── DuplicateEngineError - engine id registered twice
│   └── UnknownEngineError - engine id never registered
├── SourceError (opening a bytecode source)
│   ├── SourceNotFoundError - path does not exist
│   └── SourceUnreadableError - path exists but cannot be read
├── UsageError (disassembler state machine misuse)
│   ├── AlreadyOpenError - open() called twice
│   └── NotReadyError - decode()/render() called too early
└── MalformedBytecodeError - bytes that the engine cannot decode

Design Philosophy
-----------------
Every exception carries the structured context that produced it (engine
id, path, byte offset, opcode) as attributes, so the command-line driver
can format messages and choose an exit code without parsing strings.
"""

from typing import Iterable, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class ScriptDisError(Exception):
    """
    Base exception for all scriptdis errors.

        try:
            disasm = registry.create("scummv6")
            disasm.open("script.bin")
            disasm.decode()
        except ScriptDisError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Registry Exceptions
# =============================================================================

class RegistryError(ScriptDisError):
    """Base exception for engine registry errors."""
    pass


class DuplicateEngineError(RegistryError):
    """
    Engine id registered more than once.

    This is a configuration error detected while the registry is being
    populated at startup, never at lookup time.
    """

    def __init__(self, engine_id: str):
        self.engine_id = engine_id
        super().__init__(f"engine '{engine_id}' is already registered")


class UnknownEngineError(RegistryError):
    """
    Requested engine id was never registered.

    Attributes:
        engine_id: The id that was requested
        known_ids: Ids that are registered, sorted, for suggestions
    """

    def __init__(self, engine_id: str, known_ids: Iterable[str] = ()):
        self.engine_id = engine_id
        self.known_ids = sorted(known_ids)

        message = f"unknown engine '{engine_id}'"
        if self.known_ids:
            message += f" (available: {', '.join(self.known_ids)})"
        super().__init__(message)


# =============================================================================
# Source Exceptions
# =============================================================================

class SourceError(ScriptDisError):
    """
    Error opening a bytecode source.

    Attributes:
        path: The path that was being opened
        reason: Short description of the failure
    """

    def __init__(self, path: str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"cannot open '{self.path}': {reason}")


class SourceNotFoundError(SourceError):
    """The source path does not exist."""

    def __init__(self, path: str, reason: str = "no such file"):
        super().__init__(path, reason)


class SourceUnreadableError(SourceError):
    """
    The source path exists but cannot be read.

    Raised for directories, permission problems and any other OS-level
    failure while reading the file.
    """
    pass


# =============================================================================
# State Machine Exceptions
# =============================================================================

class UsageError(ScriptDisError):
    """
    Disassembler operation called in the wrong state.

    These indicate a bug in the calling code rather than a problem with
    the input, and are not expected to be recovered from.

    Attributes:
        operation: The operation that was attempted ("open", "decode", ...)
        state: Name of the state the disassembler was in
    """

    def __init__(self, operation: str, state: str, message: str):
        self.operation = operation
        self.state = state
        super().__init__(message)


class AlreadyOpenError(UsageError):
    """open() called on a disassembler that already has a source."""

    def __init__(self, state: str, path: Optional[str] = None):
        self.path = path
        message = "disassembler already has an open source"
        if path:
            message += f" ('{path}')"
        super().__init__("open", state, message)


class NotReadyError(UsageError):
    """decode() called before open(), or render() called before decode()."""

    def __init__(self, operation: str, state: str, required: str):
        self.required = required
        super().__init__(
            operation,
            state,
            f"cannot {operation}() in state {state}; call {required}() first",
        )


# =============================================================================
# Decode Exceptions
# =============================================================================

class MalformedBytecodeError(ScriptDisError):
    """
    The byte stream cannot be decoded by the engine.

    Attributes:
        offset: Byte offset of the offending instruction
        opcode: Opcode value at that offset, when known
        reason: Short description of the failure
    """

    def __init__(
        self,
        offset: int,
        reason: str,
        opcode: Optional[int] = None,
    ):
        self.offset = offset
        self.opcode = opcode
        self.reason = reason

        message = f"malformed bytecode at offset 0x{offset:04X}: {reason}"
        if opcode is not None:
            message += f" (opcode 0x{opcode:02X})"
        super().__init__(message)
