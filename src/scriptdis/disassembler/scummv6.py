"""
SCUMM v6 Disassembler
=====================

Disassembles SCUMM v6 script bytecode (the stack-based script format used
by the SCUMM engine in its version 6 games) into a flat instruction list.

Encoding Overview:
    - One opcode byte per instruction
    - Arguments are normally passed on the VM stack, so most opcodes have
      no inline operands
    - Inline operands are little-endian
    - Some opcodes select a variant with a second "sub-opcode" byte
      (actorOps, verbOps, print*, wait, ...)

Operand format codes (used in the tables below):
    "" = no operand
    "b" = 1 byte integer
    "B" = 1 byte variable number
    "w" = 2 byte signed integer
    "v" = 2 byte variable number
    "j" = 2 byte signed jump offset, relative to the end of the instruction
    "s" = NUL-terminated string with 0xFF escape sequences

Variable numbers are rendered by scope: bit 0x8000 marks a bit variable,
bit 0x4000 a local variable, anything else is a global variable.

Usage:
    disasm = ScummV6Disassembler()
    disasm.open("script.bin")
    for instr in disasm.decode():
        print(instr)

Copyright (c) 2025-2026 scriptdis Contributors
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from scriptdis.disassembler.base import Disassembler
from scriptdis.disassembler.reader import ByteCursor
from scriptdis.instruction import Instruction, Operand, OperandKind


# =============================================================================
# Opcode Definitions
# =============================================================================

@dataclass(frozen=True)
class SubOpInfo:
    """A variant of an opcode family selected by a second byte."""
    subop: int
    name: str
    operand_format: str = ""


@dataclass(frozen=True)
class OpcodeInfo:
    """
    Information about a SCUMM v6 opcode.

    Attributes:
        opcode: The opcode byte
        mnemonic: Name used in listings
        operand_format: Inline operand format codes
        subops: Sub-opcode table for opcode families (None otherwise)
    """
    opcode: int
    mnemonic: str
    operand_format: str = ""
    subops: Optional[Dict[int, SubOpInfo]] = None


def _subops(*entries) -> Dict[int, SubOpInfo]:
    table = {}
    for entry in entries:
        info = SubOpInfo(*entry)
        table[info.subop] = info
    return table


# -----------------------------------------------------------------------------
# Sub-opcode tables
# -----------------------------------------------------------------------------

CURSOR_SUBOPS = _subops(
    (0x90, "cursorOn"),
    (0x91, "cursorOff"),
    (0x92, "userPutOn"),
    (0x93, "userPutOff"),
    (0x94, "cursorSoftOn"),
    (0x95, "cursorSoftOff"),
    (0x96, "userPutSoftOn"),
    (0x97, "userPutSoftOff"),
    (0x99, "setCursorImg"),
    (0x9A, "setCursorHotspot"),
    (0x9C, "initCharset"),
    (0x9D, "charsetColors"),
    (0xD6, "setCursorTransparent"),
)

RESOURCE_SUBOPS = _subops(
    (0x64, "loadScript"),
    (0x65, "loadSound"),
    (0x66, "loadCostume"),
    (0x67, "loadRoom"),
    (0x68, "nukeScript"),
    (0x69, "nukeSound"),
    (0x6A, "nukeCostume"),
    (0x6B, "nukeRoom"),
    (0x6C, "lockScript"),
    (0x6D, "lockSound"),
    (0x6E, "lockCostume"),
    (0x6F, "lockRoom"),
    (0x70, "unlockScript"),
    (0x71, "unlockSound"),
    (0x72, "unlockCostume"),
    (0x73, "unlockRoom"),
    (0x75, "loadCharset"),
    (0x76, "nukeCharset"),
    (0x77, "loadFlObject"),
)

ROOM_SUBOPS = _subops(
    (0xAC, "roomScroll"),
    (0xAE, "setScreen"),
    (0xAF, "setPalColor"),
    (0xB0, "shakeOn"),
    (0xB1, "shakeOff"),
    (0xB3, "darkenPalette"),
    (0xB4, "saveLoadRoom"),
    (0xB5, "screenEffect"),
    (0xB6, "darkenPaletteRGB"),
    (0xB7, "setupShadowPalette"),
    (0xBA, "palManipulate"),
    (0xBB, "colorCycleDelay"),
    (0xD5, "setPalette"),
    (0xDC, "copyPalColor"),
)

ACTOR_SUBOPS = _subops(
    (0x4C, "setCostume"),
    (0x4D, "setWalkSpeed"),
    (0x4E, "setSound"),
    (0x4F, "setWalkFrame"),
    (0x50, "setTalkFrame"),
    (0x51, "setStandFrame"),
    (0x52, "setAnimation"),
    (0x53, "init"),
    (0x54, "setElevation"),
    (0x55, "setAnimationDefault"),
    (0x56, "setPalette"),
    (0x57, "setTalkColor"),
    (0x58, "setName", "s"),
    (0x59, "setInitFrame"),
    (0x5B, "setWidth"),
    (0x5C, "setScale"),
    (0x5D, "setNeverZClip"),
    (0x5E, "setAlwaysZClip"),
    (0x5F, "setIgnoreBoxes"),
    (0x60, "setFollowBoxes"),
    (0x61, "setAnimSpeed"),
    (0x62, "setShadowMode"),
    (0x63, "setTalkPos"),
    (0xC5, "setCurActor"),
    (0xC6, "setAnimVar"),
    (0xD7, "setIgnoreTurnsOn"),
    (0xD8, "setIgnoreTurnsOff"),
    (0xD9, "reInit"),
    (0xE3, "setLayer"),
    (0xE4, "setWalkScript"),
    (0xE5, "setStanding"),
    (0xE6, "setDirection"),
    (0xE7, "turnToDirection"),
    (0xE9, "freeze"),
    (0xEA, "unfreeze"),
    (0xEB, "setTalkScript"),
)

VERB_SUBOPS = _subops(
    (0x7C, "loadImg"),
    (0x7D, "loadString", "s"),
    (0x7E, "setColor"),
    (0x7F, "setHiColor"),
    (0x80, "setXY"),
    (0x81, "setOn"),
    (0x82, "setOff"),
    (0x83, "kill"),
    (0x84, "init"),
    (0x85, "setDimColor"),
    (0x86, "setDimmed"),
    (0x87, "setKey"),
    (0x88, "setCenter"),
    (0x89, "setToString"),
    (0x8B, "setToObject"),
    (0x8C, "setBkColor"),
    (0xC4, "setCurVerb"),
    (0xFF, "redraw"),
)

ARRAY_SUBOPS = _subops(
    (0xCD, "assignString", "vs"),
    (0xD0, "assignIntList", "v"),
    (0xD4, "assign2DimList", "v"),
)

SAVE_RESTORE_VERB_SUBOPS = _subops(
    (0x8D, "saveVerbs"),
    (0x8E, "restoreVerbs"),
    (0x8F, "deleteVerbs"),
)

WAIT_SUBOPS = _subops(
    (0xA8, "waitForActor", "j"),
    (0xA9, "waitForMessage"),
    (0xAA, "waitForCamera"),
    (0xAB, "waitForSentence"),
    (0xE2, "waitUntilActorDrawn", "j"),
    (0xE8, "waitUntilActorTurned", "j"),
)

SYSTEM_SUBOPS = _subops(
    (0x9E, "restart"),
    (0x9F, "pause"),
    (0xA0, "quit"),
)

PRINT_SUBOPS = _subops(
    (0x41, "at"),
    (0x42, "color"),
    (0x43, "clipped"),
    (0x45, "center"),
    (0x47, "left"),
    (0x48, "overhead"),
    (0x4A, "mumble"),
    (0x4B, "text", "s"),
    (0xFE, "begin"),
    (0xFF, "end"),
)

DIM_SUBOPS = _subops(
    (0xC7, "int", "v"),
    (0xC8, "bit", "v"),
    (0xC9, "nibble", "v"),
    (0xCA, "byte", "v"),
    (0xCB, "string", "v"),
    (0xCC, "nuke", "v"),
)

DIM2_SUBOPS = _subops(
    (0xC7, "int", "v"),
    (0xC8, "bit", "v"),
    (0xC9, "nibble", "v"),
    (0xCA, "byte", "v"),
    (0xCB, "string", "v"),
)


# -----------------------------------------------------------------------------
# Opcode table
# -----------------------------------------------------------------------------

def _build_opcode_table() -> Dict[int, OpcodeInfo]:
    entries = [
        # Stack and variables
        (0x00, "pushByte", "b"),
        (0x01, "pushWord", "w"),
        (0x02, "pushByteVar", "B"),
        (0x03, "pushWordVar", "v"),
        (0x06, "byteArrayRead", "B"),
        (0x07, "wordArrayRead", "v"),
        (0x0A, "byteArrayIndexedRead", "B"),
        (0x0B, "wordArrayIndexedRead", "v"),
        (0x0C, "dup"),
        (0x0D, "not"),
        (0x0E, "eq"),
        (0x0F, "neq"),
        (0x10, "gt"),
        (0x11, "lt"),
        (0x12, "le"),
        (0x13, "ge"),
        (0x14, "add"),
        (0x15, "sub"),
        (0x16, "mul"),
        (0x17, "div"),
        (0x18, "land"),
        (0x19, "lor"),
        (0x1A, "pop"),
        (0x42, "writeByteVar", "B"),
        (0x43, "writeWordVar", "v"),
        (0x46, "byteArrayWrite", "B"),
        (0x47, "wordArrayWrite", "v"),
        (0x4A, "byteArrayIndexedWrite", "B"),
        (0x4B, "wordArrayIndexedWrite", "v"),
        (0x4E, "byteVarInc", "B"),
        (0x4F, "wordVarInc", "v"),
        (0x52, "byteArrayInc", "B"),
        (0x53, "wordArrayInc", "v"),
        (0x56, "byteVarDec", "B"),
        (0x57, "wordVarDec", "v"),
        (0x5A, "byteArrayDec", "B"),
        (0x5B, "wordArrayDec", "v"),

        # Flow control and scripts
        (0x5C, "jumpTrue", "j"),
        (0x5D, "jumpFalse", "j"),
        (0x5E, "startScript"),
        (0x5F, "startScriptQuick"),
        (0x60, "startObject"),
        (0x61, "drawObject"),
        (0x62, "drawObjectAt"),
        (0x63, "drawBlastObject"),
        (0x64, "setBlastObjectWindow"),
        (0x65, "stopObjectCodeA"),
        (0x66, "stopObjectCodeB"),
        (0x67, "endCutscene"),
        (0x68, "cutscene"),
        (0x69, "stopMusic"),
        (0x6A, "freezeUnfreeze"),
        (0x6C, "breakHere"),
        (0x6D, "ifClassOfIs"),
        (0x6E, "setClass"),
        (0x6F, "getState"),
        (0x70, "setState"),
        (0x71, "setOwner"),
        (0x72, "getOwner"),
        (0x73, "jump", "j"),
        (0x74, "startSound"),
        (0x75, "stopSound"),
        (0x76, "startMusic"),
        (0x77, "stopObjectScript"),
        (0x78, "panCameraTo"),
        (0x79, "actorFollowCamera"),
        (0x7A, "setCameraAt"),
        (0x7B, "loadRoom"),
        (0x7C, "stopScript"),
        (0x7D, "walkActorToObj"),
        (0x7E, "walkActorTo"),
        (0x7F, "putActorAtXY"),
        (0x80, "putActorAtObject"),
        (0x81, "faceActor"),
        (0x82, "animateActor"),
        (0x83, "doSentence"),
        (0x84, "pickupObject"),
        (0x85, "loadRoomWithEgo"),
        (0x87, "getRandomNumber"),
        (0x88, "getRandomNumberRange"),
        (0x8A, "getActorMoving"),
        (0x8B, "isScriptRunning"),
        (0x8C, "getActorRoom"),
        (0x8D, "getObjectX"),
        (0x8E, "getObjectY"),
        (0x8F, "getObjectOldDir"),
        (0x90, "getActorWalkBox"),
        (0x91, "getActorCostume"),
        (0x92, "findInventory"),
        (0x93, "getInventoryCount"),
        (0x94, "getVerbFromXY"),
        (0x95, "beginOverride"),
        (0x96, "endOverride"),
        (0x97, "setObjectName", "s"),
        (0x98, "isSoundRunning"),
        (0x99, "setBoxFlags"),
        (0x9A, "createBoxMatrix"),
        (0x9F, "getActorFromXY"),
        (0xA0, "findObject"),
        (0xA1, "pseudoRoom"),
        (0xA2, "getActorElevation"),
        (0xA3, "getVerbEntrypoint"),
        (0xA6, "drawBox"),
        (0xA7, "popDiscard"),
        (0xA8, "getActorWidth"),
        (0xAA, "getActorScaleX"),
        (0xAB, "getActorAnimCounter"),
        (0xAC, "soundKludge"),
        (0xAD, "isAnyOf"),
        (0xAF, "isActorInBox"),
        (0xB0, "delay"),
        (0xB1, "delaySeconds"),
        (0xB2, "delayMinutes"),
        (0xB3, "stopSentence"),
        (0xBA, "talkActor", "s"),
        (0xBB, "talkEgo", "s"),
        (0xBD, "dummy"),
        (0xBE, "startObjectQuick"),
        (0xBF, "startScriptQuick2"),
        (0xC4, "abs"),
        (0xC5, "distObjectObject"),
        (0xC6, "distObjectPt"),
        (0xC7, "distPtPt"),
        (0xC8, "kernelGetFunctions"),
        (0xC9, "kernelSetFunctions"),
        (0xCA, "delayFrames"),
        (0xCB, "pickOneOf"),
        (0xCC, "pickOneOfDefault"),
        (0xCD, "stampObject"),
        (0xD0, "getDateTime"),
        (0xD1, "stopTalking"),
        (0xD2, "getAnimateVariable"),
        (0xD4, "shuffle", "v"),
        (0xD5, "jumpToScript"),
        (0xD6, "band"),
        (0xD7, "bor"),
        (0xD8, "isRoomScriptRunning"),
        (0xDD, "findAllObjects"),
        (0xE1, "getPixel"),
        (0xE3, "pickVarRandom", "v"),
        (0xE4, "setBoxSet"),
        (0xEC, "getActorLayer"),
        (0xED, "getObjectNewDir"),
    ]

    families = [
        (0x6B, "cursorCommand", CURSOR_SUBOPS),
        (0x9B, "resourceRoutines", RESOURCE_SUBOPS),
        (0x9C, "roomOps", ROOM_SUBOPS),
        (0x9D, "actorOps", ACTOR_SUBOPS),
        (0x9E, "verbOps", VERB_SUBOPS),
        (0xA4, "arrayOps", ARRAY_SUBOPS),
        (0xA5, "saveRestoreVerbs", SAVE_RESTORE_VERB_SUBOPS),
        (0xA9, "wait", WAIT_SUBOPS),
        (0xAE, "systemOps", SYSTEM_SUBOPS),
        (0xB4, "printLine", PRINT_SUBOPS),
        (0xB5, "printText", PRINT_SUBOPS),
        (0xB6, "printDebug", PRINT_SUBOPS),
        (0xB7, "printSystem", PRINT_SUBOPS),
        (0xB8, "printActor", PRINT_SUBOPS),
        (0xB9, "printEgo", PRINT_SUBOPS),
        (0xBC, "dimArray", DIM_SUBOPS),
        (0xC0, "dim2dimArray", DIM2_SUBOPS),
    ]

    table = {}
    for entry in entries:
        info = OpcodeInfo(*entry)
        table[info.opcode] = info
    for opcode, mnemonic, subops in families:
        table[opcode] = OpcodeInfo(opcode, mnemonic, subops=subops)
    return table


OPCODE_TABLE: Dict[int, OpcodeInfo] = _build_opcode_table()


# -----------------------------------------------------------------------------
# String escape codes
# -----------------------------------------------------------------------------
# Inside strings, 0xFF introduces a control sequence: a code byte, followed
# by a 2-byte argument unless the code is one of NO_ARG_ESCAPES.

STRING_ESCAPE = 0xFF
NO_ARG_ESCAPES = (0x01, 0x02, 0x03, 0x08)

ESCAPE_NAMES = {
    0x01: "newline",
    0x02: "keepText",
    0x03: "wait",
    0x04: "getInt",
    0x05: "getVerb",
    0x06: "getName",
    0x07: "getString",
    0x09: "startAnim",
    0x0A: "sound",
    0x0C: "setColor",
    0x0E: "setFont",
}


def variable_name(number: int) -> str:
    """Format a SCUMM v6 variable number by scope."""
    if number & 0x8000:
        return f"bitvar{number & 0x7FFF}"
    if number & 0x4000:
        return f"localvar{number & 0x3FFF}"
    return f"var{number}"


# =============================================================================
# SCUMM v6 Disassembler
# =============================================================================

class ScummV6Disassembler(Disassembler):
    """
    Disassembler for SCUMM v6 script bytecode.

    Decoding runs to the end of the data; there is no sentinel opcode.

    Malformed-bytecode policy: fail fast. An unknown opcode, an unknown
    sub-opcode of an opcode family, a truncated operand or an
    unterminated string raises MalformedBytecodeError carrying the offset
    of the instruction and its opcode. No partial listing is produced.
    """

    engine_id = "scummv6"
    description = "SCUMM v6"

    def decode_instruction(self, cursor: ByteCursor) -> Optional[Instruction]:
        opcode = cursor.read_opcode()
        info = OPCODE_TABLE.get(opcode)
        if info is None:
            raise cursor.error("unknown opcode")

        operands: List[Operand] = []
        operand_format = info.operand_format

        if info.subops is not None:
            subop = cursor.read_u8("sub-opcode")
            sub = info.subops.get(subop)
            if sub is None:
                raise cursor.error(f"unknown {info.mnemonic} sub-opcode 0x{subop:02X}")
            operands.append(Operand.name(sub.name, bytes([subop])))
            operand_format = sub.operand_format

        for code in operand_format:
            operands.append(self._read_operand(cursor, code))

        return cursor.instruction(info.mnemonic, operands)

    def _read_operand(self, cursor: ByteCursor, code: str) -> Operand:
        """Read one inline operand described by a format code."""
        start = cursor.pos

        if code == "b":
            value = cursor.read_u8()
            return Operand.integer(value, cursor.slice_from(start))

        if code == "w":
            value = cursor.read_s16()
            return Operand.integer(value, cursor.slice_from(start))

        if code in ("B", "v"):
            if code == "B":
                number = cursor.read_u8("variable number")
            else:
                number = cursor.read_u16("variable number")
            return Operand(
                OperandKind.INTEGER,
                number,
                cursor.slice_from(start),
                text=variable_name(number),
            )

        if code == "j":
            delta = cursor.read_s16("jump offset")
            # Relative to the end of the instruction; jumps are always last
            return Operand.address(cursor.pos + delta, cursor.slice_from(start))

        if code == "s":
            return self._read_string(cursor)

        raise ValueError(f"Unknown operand format code {code!r}")

    def _read_string(self, cursor: ByteCursor) -> Operand:
        """
        Read a NUL-terminated string.

        Text bytes are kept as characters (Operand display escapes them);
        escape sequences become {name} or {name:arg}.
        """
        start = cursor.pos
        parts = []

        while True:
            if cursor.at_end():
                raise cursor.error("unterminated string")
            byte = cursor.read_u8("string")
            if byte == 0x00:
                break

            if byte == STRING_ESCAPE:
                code = cursor.read_u8("string escape code")
                name = ESCAPE_NAMES.get(code, f"escape{code:02X}")
                if code in NO_ARG_ESCAPES:
                    parts.append(f"{{{name}}}")
                else:
                    arg = cursor.read_u16("string escape argument")
                    parts.append(f"{{{name}:{arg}}}")
            else:
                parts.append(chr(byte))

        return Operand.string("".join(parts), cursor.slice_from(start))
