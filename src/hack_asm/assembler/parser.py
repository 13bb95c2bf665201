"""
Hack Assembly Language Parser
=============================

This module implements a recursive-descent parser for Hack assembly. It
converts the token stream from the lexer into a list of Instruction nodes
that the code generator encodes.

Instruction Types
-----------------
1. **LabelDecl**: Label declaration, occupies no ROM address
   ```asm
   (LOOP)
   ```

2. **AddressInstr**: A-instruction with a numeric or symbolic operand
   ```asm
   @21
   @LOOP
   ```

3. **ComputeInstr**: C-instruction ``dest=comp;jump``
   ```asm
   D=M          // dest + comp
   D;JGT        // comp + jump
   AM=M-1       // multi-register dest
   0;JMP        // unconditional jump
   ```

Grammar
-------
```
program       := statement* EOF
statement     := (LABEL | ADDRESS | SYMBOL | c_instruction) NEWLINE
c_instruction := dest? comp jump?
dest          := REGISTER+ '='
comp          := ('-' | '!') primary | primary (binop primary)?
primary       := A | D | M | 0 | 1
binop         := '+' | '-' | '&' | '|'
jump          := ';' JUMP
```

The dest clause is ambiguous with the start of comp: in ``M=D`` the M is a
destination, in ``M;JEQ`` it is the computed value. The parser consumes
registers as a tentative dest and rewinds to the first of them when no
``=`` follows.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from hack_asm.errors import ParseError, SourceLocation
from hack_asm.assembler.lexer import Lexer, Token, TokenType, split_lines

logger = logging.getLogger(__name__)


# =============================================================================
# Expression Data Classes
# =============================================================================

@dataclass(frozen=True)
class Expression:
    """
    Base class for the comp field of a C-instruction.

    Every expression renders back to its mnemonic (``text``) so the code
    generator can look it up in the ALU table.
    """

    @property
    def text(self) -> str:
        raise NotImplementedError

    @property
    def operands(self) -> tuple[Token, ...]:
        raise NotImplementedError

    def references_memory(self) -> bool:
        """True if any operand is the M register (sets the ``a`` bit)."""
        return any(
            tok.type == TokenType.REGISTER and tok.value == "M"
            for tok in self.operands
        )

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Literal(Expression):
    """A lone register or constant: D, M, 0, 1."""
    token: Token

    @property
    def text(self) -> str:
        return self.token.text

    @property
    def operands(self) -> tuple[Token, ...]:
        return (self.token,)


@dataclass(frozen=True)
class Unary(Expression):
    """Negation or bitwise not: -1, -D, !M."""
    operator: Token
    operand: Token

    @property
    def text(self) -> str:
        return f"{self.operator.text}{self.operand.text}"

    @property
    def operands(self) -> tuple[Token, ...]:
        return (self.operand,)


@dataclass(frozen=True)
class Binary(Expression):
    """Two operands joined by +, -, & or |: D+1, M-D, D&A."""
    left: Token
    operator: Token
    right: Token

    @property
    def text(self) -> str:
        return f"{self.left.text}{self.operator.text}{self.right.text}"

    @property
    def operands(self) -> tuple[Token, ...]:
        return (self.left, self.right)


# =============================================================================
# Instruction Data Classes
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """
    Base class for all parsed statements.

    Every instruction has a source location for error reporting.
    """
    location: SourceLocation


@dataclass(frozen=True)
class LabelDecl(Instruction):
    """
    Label declaration: (NAME).

    Binds NAME to the ROM address of the next real instruction.
    """
    name: str


@dataclass(frozen=True)
class AddressInstr(Instruction):
    """
    A-instruction.

    Attributes:
        operand: Literal address (int) or symbol name (str) resolved later
    """
    operand: int | str

    @property
    def is_symbolic(self) -> bool:
        return isinstance(self.operand, str)


@dataclass(frozen=True)
class ComputeInstr(Instruction):
    """
    C-instruction.

    Attributes:
        comp: The ALU computation
        dest: Destination registers, a subset of {"A", "D", "M"}
        jump: Jump mnemonic, or None for no jump
    """
    comp: Expression
    dest: frozenset[str] = field(default_factory=frozenset)
    jump: Optional[str] = None


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Parses Hack assembly tokens into instructions.

    One Parser handles one assembly run; its cursor is private to it.

    Usage:
        tokens = Lexer(source, filename).tokenize()
        parser = Parser(tokens, filename)
        instructions = parser.parse()
    """

    BINARY_OPERATORS = (
        TokenType.PLUS,
        TokenType.MINUS,
        TokenType.AMPERSAND,
        TokenType.PIPE,
    )

    UNARY_OPERATORS = (TokenType.MINUS, TokenType.BANG)

    def __init__(
        self,
        tokens: list[Token],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: Token list from the lexer, ending with EOF
            filename: Source filename for error reporting
            source_lines: Source text split into lines, used to show the
                          offending line in error messages
        """
        self._tokens = tokens
        self._filename = filename
        self._source_lines = source_lines or []
        self._pos = 0

    def parse(self) -> list[Instruction]:
        """
        Parse all tokens into instructions.

        Returns:
            Instructions in program order

        Raises:
            ParseError: On the first malformed statement
        """
        instructions: list[Instruction] = []

        while not self._at_end():
            instructions.append(self._parse_statement())

        logger.debug(f"Parsed {len(instructions)} instructions from {self._filename}")
        return instructions

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self._tokens) or self._current().type == TokenType.EOF

    def _current(self) -> Token:
        if self._pos >= len(self._tokens):
            last = self._tokens[-1] if self._tokens else None
            return Token(
                TokenType.EOF, None,
                last.line if last else 1,
                last.column if last else 1,
                last.filename if last else self._filename,
            )
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._current()
        if not self._at_end():
            self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        """Match and consume if current token is one of the types."""
        if self._check(*types):
            return self._advance()
        return None

    def _mark(self) -> int:
        """Remember the cursor so a tentative parse can be undone."""
        return self._pos

    def _rewind(self, mark: int) -> None:
        self._pos = mark

    def _error(self, message: str, token: Optional[Token] = None,
               hint: Optional[str] = None) -> ParseError:
        """Create a ParseError located at token (default: current token)."""
        token = token or self._current()
        source_line = None
        if 0 < token.line <= len(self._source_lines):
            source_line = self._source_lines[token.line - 1]
        return ParseError(message, token.location, hint=hint, source_line=source_line)

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Instruction:
        """Parse one statement and the line break that ends it."""
        token = self._current()

        if token.type == TokenType.LABEL:
            self._advance()
            instruction: Instruction = LabelDecl(token.location, token.value)
        elif token.type in (TokenType.ADDRESS, TokenType.SYMBOL):
            self._advance()
            instruction = AddressInstr(token.location, token.value)
        else:
            instruction = self._parse_c_instruction()

        self._expect_end_of_statement()
        return instruction

    def _expect_end_of_statement(self) -> None:
        if self._match(TokenType.NEWLINE) or self._check(TokenType.EOF):
            return
        raise self._error(
            f"unexpected '{self._current().text}' after statement",
            hint="each statement must be on its own line",
        )

    def _parse_c_instruction(self) -> ComputeInstr:
        location = self._current().location
        dest = self._parse_dest()
        comp = self._parse_comp()
        jump = self._parse_jump()
        return ComputeInstr(location, comp, dest, jump)

    def _parse_dest(self) -> frozenset[str]:
        """
        Parse an optional ``dest=`` clause.

        Registers are consumed tentatively; without a following '=' the
        cursor is rewound so they are parsed again as the computation.
        """
        mark = self._mark()
        registers: list[str] = []

        while self._check(TokenType.REGISTER):
            token = self._advance()
            if token.value in registers:
                raise self._error(f"duplicate destination '{token.value}'", token)
            registers.append(token.value)

        equals = self._match(TokenType.EQUALS)
        if equals is None:
            self._rewind(mark)
            return frozenset()

        if not registers:
            raise self._error(
                "missing destination before '='",
                equals,
                hint="destinations are any of A, D and M, e.g. AM=M-1",
            )

        return frozenset(registers)

    def _parse_comp(self) -> Expression:
        """Parse the computation: unary, binary or a single operand."""
        operator = self._match(*self.UNARY_OPERATORS)
        if operator is not None:
            return Unary(operator, self._parse_primary())

        left = self._parse_primary()

        operator = self._match(*self.BINARY_OPERATORS)
        if operator is not None:
            return Binary(left, operator, self._parse_primary())

        return Literal(left)

    def _parse_primary(self) -> Token:
        token = self._current()

        if token.type == TokenType.REGISTER:
            return self._advance()

        if token.type == TokenType.NUMBER:
            if token.value in (0, 1):
                return self._advance()
            raise self._error(
                f"unexpected expression '{token.value}'",
                hint="only the constants 0 and 1 may appear in a computation",
            )

        if token.type in (TokenType.NEWLINE, TokenType.EOF):
            raise self._error("expected computation")

        raise self._error(f"unexpected expression '{token.text}'")

    def _parse_jump(self) -> Optional[str]:
        semicolon = self._match(TokenType.SEMICOLON)
        if semicolon is None:
            return None

        jump = self._match(TokenType.JUMP)
        if jump is None:
            raise self._error(
                "invalid jump",
                hint="';' must be followed by JGT, JEQ, JGE, JLT, JNE, JLE or JMP",
            )
        return jump.value


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> list[Instruction]:
    """
    Tokenize and parse Hack assembly source.

    Args:
        source: Assembly source code
        filename: Source filename for error reporting

    Returns:
        Parsed instructions in program order

    Raises:
        ScanError: If the source cannot be tokenized
        ParseError: If a statement is malformed
    """
    tokens = Lexer(source, filename).tokenize()
    parser = Parser(tokens, filename, split_lines(source))
    return parser.parse()
