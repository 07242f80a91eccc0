"""
Byte Cursor
===========

Sequential little-endian reader used by engine decoders.

The cursor tracks the start of the instruction currently being decoded so
that truncation errors and the finished Instruction both refer to the
right offset, without each engine repeating that bookkeeping.

Copyright (c) 2025-2026 scriptdis Contributors
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from scriptdis.errors import MalformedBytecodeError
from scriptdis.instruction import Instruction, Operand


@dataclass
class ByteCursor:
    """
    Reader over the bytes of an opened source.

    Attributes:
        data: The complete source bytes
        pos: Offset of the next unread byte
        start: Offset of the instruction being decoded
        opcode: Opcode of the instruction being decoded, once read
    """

    data: bytes
    pos: int = 0
    start: int = 0
    opcode: Optional[int] = None

    def begin(self) -> None:
        """Mark the current position as the start of a new instruction."""
        self.start = self.pos
        self.opcode = None

    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def error(self, reason: str) -> MalformedBytecodeError:
        """Build a MalformedBytecodeError for the current instruction."""
        return MalformedBytecodeError(self.start, reason, opcode=self.opcode)

    def _require(self, count: int, what: str) -> None:
        if self.pos + count > len(self.data):
            raise self.error(
                f"truncated {what}: need {count} byte(s), "
                f"have {self.remaining()} remaining"
            )

    def read_opcode(self) -> int:
        """Read the opcode byte and remember it for error reporting."""
        self.opcode = self.read_u8("opcode")
        return self.opcode

    def peek_u8(self) -> Optional[int]:
        if self.at_end():
            return None
        return self.data[self.pos]

    def read_u8(self, what: str = "byte operand") -> int:
        self._require(1, what)
        value = self.data[self.pos]
        self.pos += 1
        return value

    def read_s8(self, what: str = "byte operand") -> int:
        raw = self.read_u8(what)
        return raw - 0x100 if raw & 0x80 else raw

    def read_u16(self, what: str = "word operand") -> int:
        self._require(2, what)
        value = self.data[self.pos] | (self.data[self.pos + 1] << 8)
        self.pos += 2
        return value

    def read_s16(self, what: str = "word operand") -> int:
        raw = self.read_u16(what)
        return raw - 0x10000 if raw & 0x8000 else raw

    def read_bytes(self, count: int, what: str = "data") -> bytes:
        self._require(count, what)
        chunk = bytes(self.data[self.pos:self.pos + count])
        self.pos += count
        return chunk

    def slice_from(self, offset: int) -> bytes:
        """Bytes between offset and the current position."""
        return bytes(self.data[offset:self.pos])

    def instruction(
        self,
        mnemonic: str,
        operands: Iterable[Operand] = (),
    ) -> Instruction:
        """
        Build the Instruction covering start..pos.

        Raises:
            MalformedBytecodeError: If no opcode was read
        """
        if self.opcode is None:
            raise self.error("instruction built before its opcode was read")
        return Instruction(
            offset=self.start,
            size=self.pos - self.start,
            opcode=self.opcode,
            mnemonic=mnemonic,
            operands=tuple(operands),
            raw_bytes=self.slice_from(self.start),
        )
