"""
Hack Instruction Set Definition
===============================

This module defines the Hack instruction set: the bit layout of the two
instruction forms, the ALU computation table, the destination and jump
fields, and the predefined symbols every program may reference.

Instruction Forms
-----------------
1. **A-instruction**: ``@value``
   - Bit 15 is 0, bits 14-0 hold the value loaded into the A register.
   - Example: @21 -> 0000000000010101

2. **C-instruction**: ``dest=comp;jump``
   ```
   bit:  15 14 13 12 11 10  9  8  7  6  5  4  3  2  1  0
          1  1  1  a c1 c2 c3 c4 c5 c6 d1 d2 d3 j1 j2 j3
   ```
   - ``a`` selects M (a=1) or A (a=0) as the ALU's second input.
   - ``c1..c6`` select the ALU function.
   - ``d1 d2 d3`` store the result into A, D and M respectively.
   - ``j1 j2 j3`` select the jump condition.
   - Example: M=M+1 -> 1111110111001000

Memory Map
----------
| Range         | Use                          |
|---------------|------------------------------|
| 0-15          | Virtual registers R0-R15     |
| 16-16383      | Program variables            |
| 16384-24575   | Screen memory map (SCREEN)   |
| 24576         | Keyboard memory map (KBD)    |
"""

from typing import Optional


# =============================================================================
# Word Layout Constants
# =============================================================================

WORD_BITS = 16
WORD_MAX = (1 << WORD_BITS) - 1          # Largest value an A-instruction can hold
A_INSTRUCTION_LIMIT = 0x8000             # Values at/above this set the opcode bit

C_PREFIX = 0b111 << 13                   # Bits 15-13 of every C-instruction
A_BIT_SHIFT = 12
COMP_SHIFT = 6
DEST_SHIFT = 3

VARIABLE_BASE = 16                       # First RAM address handed to variables


# =============================================================================
# Predefined Symbols
# =============================================================================
# Symbols every Hack program may reference without declaring them.
# The virtual registers R0-R15 alias the first 16 RAM words; SP, LCL, ARG,
# THIS and THAT alias R0-R4 and are used by the VM translator.
# =============================================================================

PREDEFINED_SYMBOLS: dict[str, int] = {
    "SP": 0,
    "LCL": 1,
    "ARG": 2,
    "THIS": 3,
    "THAT": 4,
    **{f"R{n}": n for n in range(16)},
    "SCREEN": 0x4000,
    "KBD": 0x6000,
}


# =============================================================================
# Computation Table
# =============================================================================
# Key: comp mnemonic written with the A register
# Value: c1..c6 ALU control bits
#
# The M forms share the A encodings; the ``a`` bit tells them apart, so the
# table is looked up with every M replaced by A.
# =============================================================================

COMP_TABLE: dict[str, int] = {
    "0":   0b101010,
    "1":   0b111111,
    "-1":  0b111010,
    "D":   0b001100,
    "A":   0b110000,
    "!D":  0b001101,
    "!A":  0b110001,
    "-D":  0b001111,
    "-A":  0b110011,
    "D+1": 0b011111,
    "A+1": 0b110111,
    "D-1": 0b001110,
    "A-1": 0b110010,
    "D+A": 0b000010,
    "D-A": 0b010011,
    "A-D": 0b000111,
    "D&A": 0b000000,
    "D|A": 0b010101,
}


# =============================================================================
# Destination and Jump Fields
# =============================================================================

# Register -> d1/d2/d3 bit inside the 3-bit dest field
DEST_BITS: dict[str, int] = {
    "A": 0b100,
    "D": 0b010,
    "M": 0b001,
}

JUMP_TABLE: dict[Optional[str], int] = {
    None:  0b000,
    "JGT": 0b001,
    "JEQ": 0b010,
    "JGE": 0b011,
    "JLT": 0b100,
    "JNE": 0b101,
    "JLE": 0b110,
    "JMP": 0b111,
}

JUMP_MNEMONICS = frozenset(name for name in JUMP_TABLE if name is not None)

REGISTERS = frozenset(DEST_BITS)


# =============================================================================
# Lookup Functions
# =============================================================================

def get_comp_bits(mnemonic: str) -> Optional[int]:
    """
    Look up the c1..c6 bits for a computation.

    Args:
        mnemonic: The comp mnemonic (e.g., "M+1", "D&A")

    Returns:
        The 6-bit ALU code, or None if the computation is not supported
    """
    return COMP_TABLE.get(mnemonic.replace("M", "A"))


def is_predefined(name: str) -> bool:
    """Check if a name is one of the built-in symbols."""
    return name in PREDEFINED_SYMBOLS


def is_jump_mnemonic(text: str) -> bool:
    """Check if text is exactly one of the seven jump mnemonics."""
    return text in JUMP_MNEMONICS


def to_binary(word: int) -> str:
    """Render a machine word as 16 ASCII binary digits, MSB first."""
    return format(word, f"0{WORD_BITS}b")
