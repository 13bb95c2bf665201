"""
Hack Assembler Error Hierarchy
==============================

This module defines the exception hierarchy for the Hack assembler.
All exceptions inherit from HackError, allowing callers to catch every
assembler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
HackError (base)
└── AssemblerError (assembly pipeline)
    ├── ScanError - invalid characters, unterminated labels, bad jumps
    ├── ParseError - malformed statements and C-instruction clauses
    ├── EncodeError - values that cannot be encoded into a 16-bit word
    └── DuplicateSymbolError - label declared more than once

Each exception captures source location information (filename, line,
column) when applicable. Error messages follow this format:

    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class HackError(Exception):
    """
    Base exception for all Hack assembler errors.

        try:
            Assembler().assemble_file("Prog.asm")
        except HackError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        if self.column > 0:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(HackError):
    """
    Base exception for all assembly pipeline errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def line(self) -> Optional[int]:
        """Line number of the offending source, if known."""
        return self.location.line if self.location else None

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            Prog.asm:3:1: error: duplicate destination
                DD=1
                ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class ScanError(AssemblerError):
    """
    Lexical error in assembly source.

    Raised by the scanner when a line cannot be split into tokens.

    Examples:
        - Unexpected character (lowercase letters, lone '/', etc.)
        - Unterminated label declaration: (LOOP
        - Label starting with a digit: (1LOOP)
        - Unknown jump mnemonic: JXX
    """
    pass


class ParseError(AssemblerError):
    """
    Syntax error in a statement.

    Examples:
        - Duplicate destination register: DD=1
        - Missing destination before '=': =D
        - Unrecognised computation: D=*
        - Malformed jump clause: 0;
        - Two statements on one line: @1 D=A
    """
    pass


class EncodeError(AssemblerError):
    """
    Instruction cannot be encoded into a 16-bit machine word.

    Examples:
        - Address literal above 65535: @70000
        - Computation missing from the ALU table: D=A+D
    """
    pass


class DuplicateSymbolError(AssemblerError):
    """
    Label declared multiple times.

    Includes the location of the first declaration when available.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{symbol}' was first declared at {original_location}"

        super().__init__(
            f"duplicate label '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )
