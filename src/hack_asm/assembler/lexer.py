"""
Hack Assembly Language Lexer
============================

This module implements the lexer (tokenizer) for Hack assembly language.
Source is scanned one line at a time: every Hack statement fits on a single
line, so the per-line Scanner never needs to look past a line break.

Token Types
-----------
- ADDRESS: Numeric operand of an A-instruction (@21)
- SYMBOL: Symbolic operand of an A-instruction (@LOOP, @i, @R3)
- LABEL: Label declaration ((LOOP)), value is the name without parentheses
- REGISTER: A, D or M
- NUMBER: Numeric literal in a computation (0 or 1 are meaningful)
- Operators: =, +, -, &, |, !, ;
- JUMP: One of JGT, JEQ, JGE, JLT, JNE, JLE, JMP
- NEWLINE: End of line
- EOF: End of input

Comments
--------
``//`` starts a comment that runs to the end of the line. Lines holding
nothing but whitespace and/or a comment produce no tokens at all.

Example
-------
>>> from hack_asm.assembler.lexer import Lexer
>>> for token in Lexer("D=M;JGT  // test", "example.asm").tokenize():
...     print(token)
Token(REGISTER, 'D', 1:1)
Token(EQUALS, '=', 1:2)
Token(REGISTER, 'M', 1:3)
Token(SEMICOLON, ';', 1:4)
Token(JUMP, 'JGT', 1:5)
Token(NEWLINE, 1:17)
Token(EOF, 2:1)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import logging
import string

from hack_asm.cpu import is_jump_mnemonic
from hack_asm.errors import ScanError, SourceLocation

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Token types for the Hack assembly language.
    """

    # Structural tokens
    NEWLINE = auto()     # End of line (terminates a statement)
    EOF = auto()         # End of input

    # A-instruction operands and label declarations
    ADDRESS = auto()     # @123
    SYMBOL = auto()      # @name
    LABEL = auto()       # (name)

    # C-instruction operands
    REGISTER = auto()    # A, D, M
    NUMBER = auto()      # 0, 1

    # Operators
    EQUALS = auto()      # =
    PLUS = auto()        # +
    MINUS = auto()       # -
    AMPERSAND = auto()   # &
    PIPE = auto()        # |
    BANG = auto()        # !
    SEMICOLON = auto()   # ;

    # Jump mnemonics
    JUMP = auto()        # JGT, JEQ, JGE, JLT, JNE, JLE, JMP


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The TokenType classification
        value: Address/number as int, names and operator text as str,
               None for NEWLINE and EOF
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str | int | None
    line: int
    column: int = 1
    filename: str = "<input>"

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    @property
    def text(self) -> str:
        """The token as it is written in a comp mnemonic."""
        return "" if self.value is None else str(self.value)


# =============================================================================
# Scanner (one line)
# =============================================================================

class Scanner:
    """
    Splits a single line of Hack assembly into tokens.

    scan() is a generator: tokens are produced lazily and the first error
    on the line is raised, ending the sequence. A Scanner consumes its
    line and cannot be restarted.

    Usage:
        tokens = list(Scanner("@LOOP", 7, "Prog.asm").scan())
    """

    # Characters that map directly to a token
    SINGLE_CHAR_TOKENS = {
        "A": TokenType.REGISTER,
        "D": TokenType.REGISTER,
        "M": TokenType.REGISTER,
        "=": TokenType.EQUALS,
        "+": TokenType.PLUS,
        "-": TokenType.MINUS,
        "&": TokenType.AMPERSAND,
        "|": TokenType.PIPE,
        "!": TokenType.BANG,
        ";": TokenType.SEMICOLON,
    }

    def __init__(self, line: str, line_number: int, filename: str = "<input>"):
        """
        Initialize the scanner with one line of source.

        Args:
            line: The source line, with or without its line break
            line_number: Line number of this line (1-indexed)
            filename: Name of the source file (for error messages)
        """
        self.line = line.rstrip("\r\n")
        self.line_number = line_number
        self.filename = filename
        self._pos = 0
        self._consumed = False

    def scan(self) -> Iterator[Token]:
        """
        Generate the tokens of the line, ending with a NEWLINE token.

        Yields:
            Token objects in source order

        Raises:
            ScanError: On the first invalid lexeme of the line
        """
        if self._consumed:
            return
        self._consumed = True

        while not self._at_end():
            char = self._peek()

            if char.isspace():
                self._advance()
                continue

            if char == "/":
                if self._peek(1) != "/":
                    raise self._error("unexpected character '/'")
                # Comment: nothing after it matters
                break

            yield self._scan_token()

        yield self._make_token(TokenType.NEWLINE, None, len(self.line) + 1)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.line)

    def _peek(self, offset: int = 0) -> str:
        """Look at a character without consuming it ("" past end of line)."""
        pos = self._pos + offset
        if pos >= len(self.line):
            return ""
        return self.line[pos]

    def _advance(self) -> str:
        char = self._peek()
        self._pos += 1
        return char

    def _grab_until(self, stop: str = "") -> str:
        """Consume characters up to whitespace, a stop character or end of line."""
        start = self._pos
        while not self._at_end():
            char = self._peek()
            if char.isspace() or (char and char in stop):
                break
            self._pos += 1
        return self.line[start:self._pos]

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(self, token_type: TokenType, value: str | int | None,
                    column: int) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=self.line_number,
            column=column,
            filename=self.filename,
        )

    def _error(self, message: str, column: Optional[int] = None,
               hint: Optional[str] = None) -> ScanError:
        """Create a ScanError pointing into the current line."""
        location = SourceLocation(
            self.filename,
            self.line_number,
            column if column is not None else self._pos + 1,
        )
        return ScanError(message, location, hint=hint, source_line=self.line)

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        """Scan the token starting at the current (non-blank) character."""
        start_column = self._pos + 1
        char = self._peek()

        if char == "@":
            return self._scan_address(start_column)

        if char == "(":
            return self._scan_label(start_column)

        if char in self.SINGLE_CHAR_TOKENS:
            self._advance()
            return self._make_token(self.SINGLE_CHAR_TOKENS[char], char, start_column)

        if char == "J":
            return self._scan_jump(start_column)

        if char in string.digits:
            return self._scan_number(start_column)

        raise self._error(f"unexpected character '{char}'")

    def _scan_address(self, start_column: int) -> Token:
        """
        Scan an A-instruction operand.

        Everything up to the next whitespace belongs to the operand; a
        purely numeric operand is an ADDRESS, anything else a SYMBOL.
        """
        self._advance()  # consume @
        text = self._grab_until()

        if not text:
            raise self._error(
                "expected address or symbol after '@'",
                start_column,
                hint="write @value or @name",
            )

        if all(c in string.digits for c in text):
            return self._make_token(TokenType.ADDRESS, int(text), start_column)
        return self._make_token(TokenType.SYMBOL, text, start_column)

    def _scan_label(self, start_column: int) -> Token:
        """Scan a label declaration: (NAME)."""
        self._advance()  # consume (
        name = self._grab_until(")")

        if self._peek() != ")":
            raise self._error("unterminated label", start_column,
                              hint="labels are written (NAME)")

        if not name:
            raise self._error("empty label", start_column)

        if name[0] in string.digits:
            raise self._error("label cannot start with a digit", start_column + 1)

        self._advance()  # consume )
        return self._make_token(TokenType.LABEL, name, start_column)

    def _scan_jump(self, start_column: int) -> Token:
        """Scan a jump mnemonic; only the seven exact spellings are valid."""
        text = self._grab_until()
        if not is_jump_mnemonic(text):
            raise self._error(
                f"unexpected jump type '{text}'",
                start_column,
                hint="valid jumps: JGT, JEQ, JGE, JLT, JNE, JLE, JMP",
            )
        return self._make_token(TokenType.JUMP, text, start_column)

    def _scan_number(self, start_column: int) -> Token:
        """Scan a decimal literal. Only 0 and 1 survive parsing."""
        chars = []
        while self._peek() and self._peek() in string.digits:
            chars.append(self._advance())
        return self._make_token(TokenType.NUMBER, int("".join(chars)), start_column)


# =============================================================================
# Lexer (whole source)
# =============================================================================

class Lexer:
    """
    Tokenizes a complete Hack assembly source.

    Runs a Scanner over every line, drops lines that hold no statement
    (blank or comment-only) and terminates the stream with an EOF token.

    Usage:
        tokens = Lexer(source_text, filename).tokenize()

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

    def tokenize(self) -> list[Token]:
        """
        Tokenize the whole source.

        Returns:
            All statement tokens followed by a single EOF token

        Raises:
            ScanError: If any line fails to scan
        """
        tokens: list[Token] = []
        line_count = 0

        for line_number, line in enumerate(split_lines(self.source), start=1):
            line_count = line_number
            line_tokens = list(Scanner(line, line_number, self.filename).scan())

            # Blank and comment-only lines scan to a lone NEWLINE
            if line_tokens[0].type == TokenType.NEWLINE:
                continue

            tokens.extend(line_tokens)

        eof_line = tokens[-1].line + 1 if tokens else 1
        tokens.append(Token(TokenType.EOF, None, eof_line, 1, self.filename))

        logger.debug(f"Scanned {len(tokens)} tokens from {line_count} lines of {self.filename}")
        return tokens


def split_lines(source: str) -> list[str]:
    """
    Split source text into lines at line feeds only.

    Form feeds, vertical tabs and Unicode line separators stay inside their
    line, so a comment holding one still ends at the real line break. A
    trailing carriage return is dropped from each line.
    """
    return [line.rstrip("\r") for line in source.split("\n")]


def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """Convenience wrapper around Lexer(source, filename).tokenize()."""
    return Lexer(source, filename).tokenize()
