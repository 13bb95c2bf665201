"""
Hack Assembler
==============

This package translates Hack assembly source (.asm) into the Hack
computer's machine code image (.hack): one 16-digit binary line per
instruction.

Main Components
---------------
- **Assembler**: Main assembler class that orchestrates the assembly process
- **Lexer / Scanner**: Tokenize the source one line at a time
- **Parser**: Parses tokens into instructions (labels, A- and C-instructions)
- **SymbolTable**: Predefined symbols, labels and variables
- **CodeGenerator**: Two-pass address assignment and encoding

Assembly Process
----------------
1. **Tokenizing (Lexer + Scanner)**:
   - Scan each line into tokens, dropping blank and comment-only lines
   - Terminate the token stream with EOF

2. **Parsing (Parser)**:
   - Build one Instruction per statement
   - Resolve the dest/comp ambiguity of C-instructions

3. **Code Generation (CodeGenerator)** (two-pass):
   - Pass 1: Bind labels to ROM addresses
   - Pass 2: Resolve symbols (allocating variables from RAM 16) and encode

Example Usage
-------------
>>> from hack_asm.assembler import assemble
>>> print(assemble("@LOOP\\n(LOOP)\\n0;JMP\\n"), end="")
0000000000000001
1110101010000111
"""

from hack_asm.assembler.assembler import Assembler, assemble, assemble_file
from hack_asm.assembler.lexer import Lexer, Scanner, Token, TokenType, tokenize
from hack_asm.assembler.parser import (
    Parser,
    Instruction,
    LabelDecl,
    AddressInstr,
    ComputeInstr,
    Expression,
    Literal,
    Unary,
    Binary,
    parse_source,
)
from hack_asm.assembler.symbols import SymbolTable, Symbol, SymbolKind
from hack_asm.assembler.codegen import CodeGenerator, EncodedWord

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Lexer
    "Lexer",
    "Scanner",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "Parser",
    "Instruction",
    "LabelDecl",
    "AddressInstr",
    "ComputeInstr",
    "Expression",
    "Literal",
    "Unary",
    "Binary",
    "parse_source",
    # Symbols
    "SymbolTable",
    "Symbol",
    "SymbolKind",
    # Code generator
    "CodeGenerator",
    "EncodedWord",
]
