"""
Instruction Model
=================

Value records produced by every engine's decode loop.

An Instruction is one decoded operation: where it starts in the source,
how many bytes it consumed, the raw opcode, an engine-defined mnemonic and
the decoded operands. Instructions are immutable once produced; rendering
reads them but never changes them.

Usage:
    instr = Instruction(
        offset=0x10,
        size=3,
        opcode=0x01,
        mnemonic="pushWord",
        operands=(Operand.integer(500, b"\\xf4\\x01"),),
        raw_bytes=b"\\x01\\xf4\\x01",
    )
    print(instr.format(show_bytes=False))  # 00000010: pushWord 500
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Tuple, Union


# =============================================================================
# Operands
# =============================================================================

class OperandKind(Enum):
    """Kinds of decoded operand values."""
    INTEGER = auto()      # Immediate numeric value
    STRING = auto()       # Inline text
    ADDRESS = auto()      # Absolute offset into the source (jump target)
    NAME = auto()         # Symbolic name (variable, sub-operation)


def escape_string(text: str) -> str:
    """
    Escape text for display inside double quotes.

    Backslashes and quotes are escaped, characters outside printable
    ASCII are shown as \\xNN, so every rendering maps back to one text.
    """
    parts = []
    for ch in text:
        if ch == "\\":
            parts.append("\\\\")
        elif ch == '"':
            parts.append('\\"')
        elif " " <= ch <= "~":
            parts.append(ch)
        else:
            parts.append(f"\\x{ord(ch):02X}")
    return "".join(parts)


@dataclass(frozen=True)
class Operand:
    """
    One decoded operand.

    Attributes:
        kind: What sort of value this is
        value: int for INTEGER/ADDRESS, str for STRING/NAME
        raw: The bytes the operand was decoded from (may be empty for
             operands implied by the opcode)
        text: Optional display override used instead of the default format
    """
    kind: OperandKind
    value: Union[int, str]
    raw: bytes = b""
    text: Optional[str] = None

    @classmethod
    def integer(cls, value: int, raw: bytes = b"") -> "Operand":
        return cls(OperandKind.INTEGER, value, raw)

    @classmethod
    def string(cls, value: str, raw: bytes = b"") -> "Operand":
        return cls(OperandKind.STRING, value, raw)

    @classmethod
    def address(cls, value: int, raw: bytes = b"") -> "Operand":
        return cls(OperandKind.ADDRESS, value, raw)

    @classmethod
    def name(cls, value: str, raw: bytes = b"") -> "Operand":
        return cls(OperandKind.NAME, value, raw)

    def __str__(self) -> str:
        if self.text is not None:
            return self.text
        if self.kind == OperandKind.ADDRESS:
            if self.value < 0:
                return f"-0x{-self.value:04X}"
            return f"0x{self.value:04X}"
        if self.kind == OperandKind.STRING:
            return f'"{escape_string(str(self.value))}"'
        return str(self.value)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.name.lower(),
            "value": self.value,
            "raw": self.raw.hex(),
            "text": str(self),
        }


# =============================================================================
# Instructions
# =============================================================================

DEFAULT_BYTES_WIDTH = 24


@dataclass(frozen=True)
class Instruction:
    """
    A single decoded instruction.

    Attributes:
        offset: Position of the first byte within the source
        size: Number of bytes consumed (always > 0)
        opcode: The raw opcode value
        mnemonic: Engine-defined symbolic name
        operands: Decoded operands in encoding order (may be empty)
        raw_bytes: The exact bytes consumed, len(raw_bytes) == size
    """
    offset: int
    size: int
    opcode: int
    mnemonic: str
    operands: Tuple[Operand, ...] = field(default_factory=tuple)
    raw_bytes: bytes = b""

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError(f"Instruction offset must be >= 0, got {self.offset}")
        if self.size <= 0:
            raise ValueError(f"Instruction size must be > 0, got {self.size}")
        if len(self.raw_bytes) != self.size:
            raise ValueError(
                f"Instruction at {self.offset}: raw_bytes has "
                f"{len(self.raw_bytes)} bytes, size is {self.size}"
            )
        # Accept any sequence of operands but store a tuple
        if not isinstance(self.operands, tuple):
            object.__setattr__(self, "operands", tuple(self.operands))

    @property
    def end(self) -> int:
        """Offset of the first byte after this instruction."""
        return self.offset + self.size

    @property
    def operand_str(self) -> str:
        """Operands formatted for display, comma separated."""
        return ", ".join(str(op) for op in self.operands)

    def format(
        self,
        show_bytes: bool = True,
        bytes_width: int = DEFAULT_BYTES_WIDTH,
    ) -> str:
        """
        Format as one listing line: OFFSET: BYTES  MNEMONIC OPERANDS

        Args:
            show_bytes: Include the raw bytes column
            bytes_width: Width of the raw bytes column; longer byte runs
                         are cut and marked with ".."

        Returns:
            The formatted line (no trailing newline)
        """
        asm = self.mnemonic
        if self.operands:
            asm = f"{self.mnemonic} {self.operand_str}"

        if not show_bytes:
            return f"{self.offset:08X}: {asm}"

        hex_bytes = " ".join(f"{b:02X}" for b in self.raw_bytes)
        if len(hex_bytes) > bytes_width:
            # Keep whole bytes only, leaving room for " .."
            keep = max((bytes_width - 2) // 3, 0)
            shown = [f"{b:02X}" for b in self.raw_bytes[:keep]]
            hex_bytes = " ".join(shown + [".."])
        return f"{self.offset:08X}: {hex_bytes.ljust(bytes_width)}  {asm}"

    def __str__(self) -> str:
        return self.format()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "offset": self.offset,
            "size": self.size,
            "opcode": self.opcode,
            "mnemonic": self.mnemonic,
            "operands": [op.to_dict() for op in self.operands],
            "bytes": self.raw_bytes.hex(),
        }
