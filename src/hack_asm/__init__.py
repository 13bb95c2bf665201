"""
Hack Assembler - Toolchain for the Hack Computer
================================================

This package translates assembly programs for the 16-bit Hack computer
into the binary machine code image the CPU executes.

Main Components
---------------
- **assembler**: Hack assembler (hackasm)
    Converts assembly source files (.asm) to machine code images (.hack)

- **cpu**: Architecture tables
    ALU computation table, destination and jump fields, predefined symbols

Quick Start
-----------
Assemble a program:
    >>> from hack_asm import Assembler
    >>> asm = Assembler()
    >>> asm.assemble_file("Max.asm")
    >>> asm.write_hack()            # writes Max.hack

Or use the command-line tool:
    $ hackasm Max.asm
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from hack_asm.assembler import Assembler, assemble, assemble_file
from hack_asm.errors import (
    HackError,
    AssemblerError,
    ScanError,
    ParseError,
    EncodeError,
    DuplicateSymbolError,
    SourceLocation,
)

__all__ = [
    "__version__",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    # Exception hierarchy
    "HackError",
    "AssemblerError",
    "ScanError",
    "ParseError",
    "EncodeError",
    "DuplicateSymbolError",
    "SourceLocation",
]
