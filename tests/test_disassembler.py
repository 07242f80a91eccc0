"""
Unit Tests for the Disassembler Contract
=======================================

Tests for the behaviour shared by every engine through the Disassembler
base class, using small test engines:
- open() from files and buffers, and its error kinds
- The UNOPENED -> OPENED -> DECODED state machine
- The decode loop: partition invariant, sentinels, determinism
- Partition checks on misbehaving engines
- render() traceability and purity

Copyright (c) 2025-2026 scriptdis Contributors
"""

import io

import pytest
from scriptdis.config import DisassemblerConfig
from scriptdis.disassembler import ByteCursor, Disassembler, DisassemblerState
from scriptdis.errors import (
    AlreadyOpenError,
    MalformedBytecodeError,
    NotReadyError,
    SourceNotFoundError,
    SourceUnreadableError,
)
from scriptdis.instruction import Instruction, Operand


# =============================================================================
# Test Engines
# =============================================================================

class PairDisassembler(Disassembler):
    """
    Opcode byte followed by one operand byte; 0xFF ends the script.

    Fails fast on a missing operand byte.
    """

    engine_id = "pair"
    description = "Opcode/operand pairs"

    def decode_instruction(self, cursor):
        opcode = cursor.read_opcode()
        if opcode == 0xFF:
            return None
        value = cursor.read_u8()
        return cursor.instruction(f"op{opcode:02X}", [Operand.integer(value, bytes([value]))])


class VariableDisassembler(Disassembler):
    """Opcode byte N followed by N operand bytes (best effort: no unknowns)."""

    engine_id = "variable"
    description = "Length-prefixed"

    def decode_instruction(self, cursor):
        count = cursor.read_opcode()
        payload = cursor.read_bytes(count)
        return cursor.instruction("data", [Operand.integer(b, bytes([b])) for b in payload])


class WrongOffsetDisassembler(Disassembler):
    """Reports every instruction at offset 0."""

    def decode_instruction(self, cursor):
        opcode = cursor.read_opcode()
        return Instruction(offset=0, size=1, opcode=opcode, mnemonic="x", raw_bytes=bytes([opcode]))


class UnderReportingDisassembler(Disassembler):
    """Consumes two bytes but reports a one-byte instruction."""

    def decode_instruction(self, cursor):
        opcode = cursor.read_opcode()
        cursor.read_u8()
        return Instruction(
            offset=cursor.start, size=1, opcode=opcode, mnemonic="x", raw_bytes=bytes([opcode])
        )


class ForgedBytesDisassembler(Disassembler):
    """Consumes one byte but reports bytes that are not in the source."""

    def decode_instruction(self, cursor):
        cursor.read_opcode()
        return Instruction(
            offset=cursor.start, size=1, opcode=0x42, mnemonic="x", raw_bytes=b"\x99"
        )


def assert_partition(instructions, length):
    """Instructions cover 0..length without gaps or overlaps."""
    expected = 0
    for instr in instructions:
        assert instr.offset == expected
        assert instr.size > 0
        expected = instr.end
    assert expected == length


# =============================================================================
# Open Tests
# =============================================================================

class TestOpen:
    """Tests for opening sources."""

    def setup_method(self):
        self.disasm = PairDisassembler()

    def test_open_file(self, tmp_path):
        """Opening a file reads its bytes and moves to OPENED."""
        path = tmp_path / "script.bin"
        path.write_bytes(bytes([0x01, 0x02]))

        self.disasm.open(path)

        assert self.disasm.state == DisassemblerState.OPENED
        assert self.disasm.data == bytes([0x01, 0x02])
        assert self.disasm.source_name == str(path)

    def test_open_str_path(self, tmp_path):
        """Plain string paths are accepted."""
        path = tmp_path / "script.bin"
        path.write_bytes(b"\x01\x02")

        self.disasm.open(str(path))
        assert self.disasm.state == DisassemblerState.OPENED

    def test_open_missing(self, tmp_path):
        """A nonexistent path fails with SourceNotFoundError."""
        missing = tmp_path / "missing.bin"

        with pytest.raises(SourceNotFoundError) as exc_info:
            self.disasm.open(missing)

        assert exc_info.value.path == str(missing)
        assert self.disasm.state == DisassemblerState.UNOPENED

    def test_missing_source_never_decodes(self, tmp_path):
        """After a failed open, decode() is not reachable."""
        with pytest.raises(SourceNotFoundError):
            self.disasm.open(tmp_path / "missing.bin")

        with pytest.raises(NotReadyError):
            self.disasm.decode()

    def test_open_directory(self, tmp_path):
        """A directory is not a readable source."""
        with pytest.raises(SourceUnreadableError):
            self.disasm.open(tmp_path)

    def test_open_bytes(self):
        """In-memory buffers can be opened directly."""
        self.disasm.open_bytes(b"\x01\x02", name="buffer")

        assert self.disasm.state == DisassemblerState.OPENED
        assert self.disasm.source_name == "buffer"


# =============================================================================
# State Machine Tests
# =============================================================================

class TestStateMachine:
    """Tests for state-machine enforcement."""

    def setup_method(self):
        self.disasm = PairDisassembler()

    def test_initial_state(self):
        """New instances are UNOPENED."""
        assert self.disasm.state == DisassemblerState.UNOPENED

    def test_decode_before_open(self):
        """decode() before open() fails with NotReadyError."""
        with pytest.raises(NotReadyError) as exc_info:
            self.disasm.decode()

        assert exc_info.value.operation == "decode"
        assert exc_info.value.required == "open"

    def test_open_twice(self):
        """A second open() fails with AlreadyOpenError."""
        self.disasm.open_bytes(b"\x01\x02")

        with pytest.raises(AlreadyOpenError):
            self.disasm.open_bytes(b"\x03\x04")

        assert self.disasm.data == b"\x01\x02"

    def test_open_after_decode(self):
        """There is no way back to UNOPENED."""
        self.disasm.open_bytes(b"\x01\x02")
        self.disasm.decode()

        with pytest.raises(AlreadyOpenError):
            self.disasm.open_bytes(b"\x03\x04")

    def test_render_before_decode(self):
        """render() before decode() fails with NotReadyError."""
        self.disasm.open_bytes(b"\x01\x02")

        with pytest.raises(NotReadyError):
            self.disasm.render(io.StringIO())

    def test_render_before_open(self):
        """render() on a fresh instance fails with NotReadyError."""
        with pytest.raises(NotReadyError):
            self.disasm.render(io.StringIO())

    def test_instructions_before_decode(self):
        """The decoded sequence is not available before decode()."""
        self.disasm.open_bytes(b"\x01\x02")

        with pytest.raises(NotReadyError):
            self.disasm.instructions

    def test_decoded_state(self):
        """decode() moves to DECODED and stores the sequence."""
        self.disasm.open_bytes(b"\x01\x02")
        result = self.disasm.decode()

        assert self.disasm.state == DisassemblerState.DECODED
        assert self.disasm.instructions == result

    def test_decode_again_returns_same(self):
        """decode() in DECODED returns the same instructions."""
        self.disasm.open_bytes(b"\x01\x02")
        first = self.disasm.decode()

        assert self.disasm.decode() is first


# =============================================================================
# Decode Loop Tests
# =============================================================================

class TestDecodeLoop:
    """Tests for the shared decode loop."""

    def test_partition(self):
        """Instructions form a gapless partition of the source."""
        data = bytes([3, 1, 2, 3, 0, 1, 9])
        disasm = VariableDisassembler()
        disasm.open_bytes(data)

        instructions = disasm.decode()

        assert [instr.size for instr in instructions] == [4, 1, 2]
        assert_partition(instructions, len(data))

    def test_raw_bytes_match_source(self):
        """raw_bytes is the exact slice consumed."""
        data = bytes([0x10, 0x20, 0x11, 0x21])
        disasm = PairDisassembler()
        disasm.open_bytes(data)

        for instr in disasm.decode():
            assert instr.raw_bytes == data[instr.offset:instr.end]

    def test_empty_source(self, tmp_path):
        """A zero-length source decodes to an empty sequence."""
        path = tmp_path / "empty.bin"
        path.write_bytes(b"")
        disasm = PairDisassembler()
        disasm.open(path)

        assert disasm.decode() == ()
        assert disasm.state == DisassemblerState.DECODED

    def test_sentinel_stops_decoding(self):
        """An engine sentinel ends the sequence early."""
        data = bytes([0x10, 0x20, 0xFF, 0x11, 0x21])
        disasm = PairDisassembler()
        disasm.open_bytes(data)

        instructions = disasm.decode()

        assert len(instructions) == 1
        assert_partition(instructions, 2)

    def test_truncated_operand(self):
        """Missing operand bytes raise MalformedBytecodeError."""
        disasm = PairDisassembler()
        disasm.open_bytes(bytes([0x10, 0x20, 0x11]))

        with pytest.raises(MalformedBytecodeError) as exc_info:
            disasm.decode()

        assert exc_info.value.offset == 2
        assert exc_info.value.opcode == 0x11
        assert disasm.state == DisassemblerState.OPENED

    def test_determinism(self):
        """Two fresh instances decode identical bytes identically."""
        data = bytes([2, 7, 8, 0, 3, 1, 2, 3])

        first = VariableDisassembler()
        first.open_bytes(data)
        second = VariableDisassembler()
        second.open_bytes(data)

        assert first.decode() == second.decode()

    def test_wrong_offset_detected(self):
        """Instructions that do not continue the partition are rejected."""
        disasm = WrongOffsetDisassembler()
        disasm.open_bytes(b"\x01\x02")

        with pytest.raises(MalformedBytecodeError) as exc_info:
            disasm.decode()

        assert exc_info.value.offset == 1

    def test_size_mismatch_detected(self):
        """Reported size must match the bytes consumed."""
        disasm = UnderReportingDisassembler()
        disasm.open_bytes(b"\x01\x02")

        with pytest.raises(MalformedBytecodeError):
            disasm.decode()

    def test_raw_bytes_must_come_from_source(self):
        """Reported raw bytes must be the bytes consumed from the source."""
        disasm = ForgedBytesDisassembler()
        disasm.open_bytes(b"\x01\x02")

        with pytest.raises(MalformedBytecodeError) as exc_info:
            disasm.decode()

        assert exc_info.value.offset == 0
        assert "do not match" in str(exc_info.value)
        assert disasm.state == DisassemblerState.OPENED


# =============================================================================
# Byte Cursor Tests
# =============================================================================

class TestByteCursor:
    """Tests for the little-endian byte cursor."""

    def test_reads(self):
        """Integers are read little-endian."""
        cursor = ByteCursor(bytes([0x01, 0xFE, 0xFF, 0x34, 0x12, 0x80]))

        assert cursor.read_u8() == 0x01
        assert cursor.read_s16() == -2
        assert cursor.read_u16() == 0x1234
        assert cursor.read_s8() == -128
        assert cursor.at_end()

    def test_truncation_reports_instruction_start(self):
        """Errors refer to the start of the current instruction."""
        cursor = ByteCursor(bytes([0xAA, 0x01, 0x02]))
        cursor.read_u8()
        cursor.begin()
        cursor.read_opcode()

        with pytest.raises(MalformedBytecodeError) as exc_info:
            cursor.read_u16()

        assert exc_info.value.offset == 1
        assert exc_info.value.opcode == 0x01

    def test_peek(self):
        """peek_u8 does not consume."""
        cursor = ByteCursor(b"\x05")

        assert cursor.peek_u8() == 5
        assert cursor.pos == 0
        cursor.read_u8()
        assert cursor.peek_u8() is None


# =============================================================================
# Render Tests
# =============================================================================

class TestRender:
    """Tests for listing output."""

    def setup_method(self):
        self.data = bytes([0x10, 0x20, 0x11, 0x21, 0x12, 0x22])
        self.disasm = PairDisassembler()
        self.disasm.open_bytes(self.data)
        self.instructions = self.disasm.decode()

    def test_one_line_per_instruction(self):
        """Every line maps to one instruction offset, in decode order."""
        lines = self.disasm.render_text().splitlines()

        assert len(lines) == len(self.instructions)
        for line, instr in zip(lines, self.instructions):
            assert line.startswith(f"{instr.offset:08X}:")
            assert instr.mnemonic in line

    def test_render_to_sink(self):
        """render() writes to any object with write()."""
        sink = io.StringIO()
        self.disasm.render(sink)

        assert sink.getvalue() == self.disasm.render_text()
        assert sink.getvalue().endswith("\n")

    def test_render_repeatable(self):
        """Rendering repeatedly gives the same text and leaves state alone."""
        first = self.disasm.render_text()
        second = self.disasm.render_text()

        assert first == second
        assert self.disasm.state == DisassemblerState.DECODED
        assert self.disasm.instructions == self.instructions

    def test_render_empty(self):
        """An empty decode renders an empty listing, not an error."""
        disasm = PairDisassembler()
        disasm.open_bytes(b"")
        disasm.decode()

        assert disasm.render_text() == ""

    def test_render_without_bytes(self):
        """Configuration can hide the bytes column."""
        disasm = PairDisassembler(DisassemblerConfig(show_bytes=False))
        disasm.open_bytes(bytes([0x10, 0x20]))
        disasm.decode()

        assert disasm.render_text() == "00000000: op10 32\n"
