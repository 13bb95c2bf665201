"""
Hack CPU Package
================

Architecture definitions for the Hack computer shared by the assembler's
code generator and symbol table: word layout, the ALU computation table,
destination and jump fields, and the predefined symbols.

Usage:
    from hack_asm.cpu import (
        COMP_TABLE,
        JUMP_TABLE,
        PREDEFINED_SYMBOLS,
        get_comp_bits,
    )
"""

from hack_asm.cpu.hack import (
    # Word layout
    WORD_BITS,
    WORD_MAX,
    A_INSTRUCTION_LIMIT,
    C_PREFIX,
    A_BIT_SHIFT,
    COMP_SHIFT,
    DEST_SHIFT,
    VARIABLE_BASE,
    # Tables
    PREDEFINED_SYMBOLS,
    COMP_TABLE,
    DEST_BITS,
    JUMP_TABLE,
    JUMP_MNEMONICS,
    REGISTERS,
    # Lookup functions
    get_comp_bits,
    is_predefined,
    is_jump_mnemonic,
    to_binary,
)

__all__ = [
    "WORD_BITS",
    "WORD_MAX",
    "A_INSTRUCTION_LIMIT",
    "C_PREFIX",
    "A_BIT_SHIFT",
    "COMP_SHIFT",
    "DEST_SHIFT",
    "VARIABLE_BASE",
    "PREDEFINED_SYMBOLS",
    "COMP_TABLE",
    "DEST_BITS",
    "JUMP_TABLE",
    "JUMP_MNEMONICS",
    "REGISTERS",
    "get_comp_bits",
    "is_predefined",
    "is_jump_mnemonic",
    "to_binary",
]
