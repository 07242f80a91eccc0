"""
Disassembler Contract
=====================

Abstract base class implemented by every engine plug-in.

The base class owns everything that is the same for all engines: the
open/decode/render state machine, reading the source, the decode loop and
its partition checks, and writing the listing. An engine only supplies
``decode_instruction`` (and optionally ``format_instruction``).

State machine:

    UNOPENED --open()--> OPENED --decode()--> DECODED

There is no way back to UNOPENED. A second open() raises AlreadyOpenError;
decode() before open() and render() before decode() raise NotReadyError.
render() may be called any number of times once DECODED.

Usage:
    disasm = ScummV6Disassembler()
    disasm.open("script.bin")
    instructions = disasm.decode()
    disasm.render(sys.stdout)

Copyright (c) 2025-2026 scriptdis Contributors
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import ClassVar, Optional, TextIO, Tuple, Union
import io
import logging

from scriptdis.config import DisassemblerConfig
from scriptdis.errors import (
    AlreadyOpenError,
    MalformedBytecodeError,
    NotReadyError,
    SourceNotFoundError,
    SourceUnreadableError,
)
from scriptdis.instruction import Instruction
from scriptdis.disassembler.reader import ByteCursor


logger = logging.getLogger(__name__)


class DisassemblerState(Enum):
    """Lifecycle states shared by all disassemblers."""
    UNOPENED = "Unopened"
    OPENED = "Opened"
    DECODED = "Decoded"


class Disassembler(ABC):
    """
    Base class for engine disassemblers.

    Subclasses set ``engine_id`` and ``description`` and implement
    ``decode_instruction``. Each instance handles exactly one source and
    must not be shared between threads.

    Attributes:
        engine_id: Registry id of the engine (class attribute)
        description: Short human-readable engine label (class attribute)
        config: Listing settings
    """

    engine_id: ClassVar[str] = ""
    description: ClassVar[str] = ""

    def __init__(self, config: Optional[DisassemblerConfig] = None):
        self.config = config or DisassemblerConfig()
        self._state = DisassemblerState.UNOPENED
        self._source_name: Optional[str] = None
        self._data = b""
        self._instructions: Tuple[Instruction, ...] = ()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> DisassemblerState:
        return self._state

    @property
    def source_name(self) -> Optional[str]:
        return self._source_name

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def instructions(self) -> Tuple[Instruction, ...]:
        """The decoded instructions (only available once DECODED)."""
        if self._state != DisassemblerState.DECODED:
            raise NotReadyError("read instructions of", self._state.value, "decode")
        return self._instructions

    # -------------------------------------------------------------------------
    # Open
    # -------------------------------------------------------------------------

    def open(self, source_path: Union[str, Path]) -> None:
        """
        Bind this disassembler to a binary source file.

        The file is read completely; decoding happens in decode().

        Args:
            source_path: Path of the bytecode file

        Raises:
            AlreadyOpenError: If a source is already open
            SourceNotFoundError: If the path does not exist
            SourceUnreadableError: If the path cannot be read
        """
        self._check_unopened()
        path = Path(source_path)

        try:
            data = path.read_bytes()
        except FileNotFoundError:
            raise SourceNotFoundError(str(path)) from None
        except IsADirectoryError:
            raise SourceUnreadableError(str(path), "is a directory") from None
        except PermissionError:
            raise SourceUnreadableError(str(path), "permission denied") from None
        except OSError as e:
            raise SourceUnreadableError(str(path), e.strerror or str(e)) from e

        self._bind(data, str(path))

    def open_bytes(self, data: bytes, name: str = "<bytes>") -> None:
        """
        Bind this disassembler to an in-memory buffer.

        Args:
            data: The bytecode
            name: Name used in log messages and listings

        Raises:
            AlreadyOpenError: If a source is already open
        """
        self._check_unopened()
        self._bind(bytes(data), name)

    def _check_unopened(self) -> None:
        if self._state != DisassemblerState.UNOPENED:
            raise AlreadyOpenError(self._state.value, self._source_name)

    def _bind(self, data: bytes, name: str) -> None:
        self._data = data
        self._source_name = name
        self._state = DisassemblerState.OPENED
        logger.debug(f"{self.engine_id}: opened {name} ({len(data)} bytes)")

    # -------------------------------------------------------------------------
    # Decode
    # -------------------------------------------------------------------------

    def decode(self) -> Tuple[Instruction, ...]:
        """
        Decode the opened source from offset 0 to the end of the stream.

        Decoding stops at the end of the data, or earlier when the engine
        reports a terminating sentinel. Calling decode() again after a
        successful decode returns the same instructions.

        Returns:
            Tuple of Instruction forming a gapless partition of the
            scanned bytes

        Raises:
            NotReadyError: If no source is open
            MalformedBytecodeError: If the engine cannot decode the bytes
        """
        if self._state == DisassemblerState.DECODED:
            return self._instructions
        if self._state != DisassemblerState.OPENED:
            raise NotReadyError("decode", self._state.value, "open")

        cursor = ByteCursor(self._data)
        result = []

        while not cursor.at_end():
            cursor.begin()
            instr = self.decode_instruction(cursor)
            if instr is None:
                logger.debug(f"{self.engine_id}: end sentinel at offset 0x{cursor.start:04X}")
                break
            self._check_partition(instr, cursor)
            result.append(instr)

        self._instructions = tuple(result)
        self._state = DisassemblerState.DECODED
        logger.debug(
            f"{self.engine_id}: decoded {len(result)} instructions "
            f"from {self._source_name} ({cursor.pos} of {len(self._data)} bytes)"
        )
        return self._instructions

    def _check_partition(self, instr: Instruction, cursor: ByteCursor) -> None:
        """Verify an engine-produced instruction continues the partition."""
        if instr.offset != cursor.start:
            raise MalformedBytecodeError(
                cursor.start,
                f"engine produced an instruction at offset 0x{instr.offset:04X}",
                opcode=instr.opcode,
            )
        if instr.end > len(self._data):
            raise MalformedBytecodeError(
                instr.offset,
                f"instruction extends past end of source ({instr.end} > {len(self._data)})",
                opcode=instr.opcode,
            )
        if instr.end != cursor.pos:
            raise MalformedBytecodeError(
                instr.offset,
                f"instruction size {instr.size} does not match "
                f"{cursor.pos - cursor.start} bytes consumed",
                opcode=instr.opcode,
            )
        if instr.raw_bytes != self._data[instr.offset:instr.end]:
            raise MalformedBytecodeError(
                instr.offset,
                "instruction bytes do not match the source",
                opcode=instr.opcode,
            )

    @abstractmethod
    def decode_instruction(self, cursor: ByteCursor) -> Optional[Instruction]:
        """
        Decode one instruction starting at cursor.pos.

        Implementations read the opcode with cursor.read_opcode(), consume
        their operands and return cursor.instruction(...). Returning None
        signals an engine-defined end sentinel and stops decoding.

        Raises:
            MalformedBytecodeError: On bytes the engine cannot decode
        """

    # -------------------------------------------------------------------------
    # Render
    # -------------------------------------------------------------------------

    def format_instruction(self, instr: Instruction) -> str:
        """
        Format one instruction as a listing line.

        Engines may override this; the line must start with the offset.
        """
        return instr.format(
            show_bytes=self.config.show_bytes,
            bytes_width=self.config.bytes_width,
        )

    def render(self, sink: TextIO) -> None:
        """
        Write the listing of the decoded instructions to sink.

        One line per instruction, in decode order. An empty instruction
        sequence writes nothing.

        Args:
            sink: Any object with a write(str) method

        Raises:
            NotReadyError: If decode() has not completed
        """
        if self._state != DisassemblerState.DECODED:
            raise NotReadyError("render", self._state.value, "decode")

        for instr in self._instructions:
            sink.write(self.format_instruction(instr))
            sink.write("\n")

    def render_text(self) -> str:
        """Return the listing as a string."""
        buffer = io.StringIO()
        self.render(buffer)
        return buffer.getvalue()

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} engine={self.engine_id!r} "
            f"state={self._state.value} source={self._source_name!r}>"
        )
