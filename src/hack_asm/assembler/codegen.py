"""
Hack Code Generator
===================

This module turns parsed instructions into 16-bit Hack machine words. It
implements a two-pass assembly process over the same instruction list:

Pass 1 (Address Assignment)
---------------------------
- Walk the instructions keeping a ROM address counter starting at 0
- Bind each label to the counter without advancing it
- Advance the counter by one for every other instruction

Pass 2 (Resolution and Encoding)
--------------------------------
- Resolve A-instruction symbols through the symbol table; names that are
  neither predefined nor labels become variables from RAM address 16
- Encode every A- and C-instruction into one machine word
- Labels produce no output

Pass 1 always completes before pass 2 starts, so labels may be referenced
before they are declared.

Output Format
-------------
One line per machine word, 16 ASCII binary digits, most significant bit
first:
```
0000000000000010
1110110000010000
```
"""

from dataclasses import dataclass
from typing import Optional
import logging

from hack_asm.errors import (
    DuplicateSymbolError,
    EncodeError,
    SourceLocation,
)
from hack_asm.assembler.lexer import TokenType
from hack_asm.assembler.parser import (
    Instruction,
    LabelDecl,
    AddressInstr,
    ComputeInstr,
    Expression,
)
from hack_asm.assembler.symbols import SymbolTable, Symbol
from hack_asm.cpu import (
    WORD_MAX,
    A_INSTRUCTION_LIMIT,
    C_PREFIX,
    A_BIT_SHIFT,
    COMP_SHIFT,
    DEST_SHIFT,
    DEST_BITS,
    JUMP_TABLE,
    get_comp_bits,
    to_binary,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Listing Entry
# =============================================================================

@dataclass
class EncodedWord:
    """
    One emitted machine word and where it came from.

    Attributes:
        address: ROM address of the word
        word: The 16-bit machine word
        instruction: The instruction it encodes
    """
    address: int
    word: int
    instruction: Instruction

    @property
    def binary(self) -> str:
        return to_binary(self.word)


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Generates Hack machine code from parsed instructions.

    The code generator owns the symbol table for the duration of a run.
    generate() creates a fresh table each time, so one generator can be
    reused for several programs.

    Usage:
        codegen = CodeGenerator()
        words = codegen.generate(instructions)
        text = codegen.get_text()
    """

    def __init__(self, allow_duplicate_labels: bool = False):
        """
        Initialize the code generator.

        Args:
            allow_duplicate_labels: If True, a label declared twice keeps its
                                    first address instead of failing assembly.
        """
        self._allow_duplicate_labels = allow_duplicate_labels
        self._symbols = SymbolTable()
        self._encoded: list[EncodedWord] = []
        self._source_lines: list[str] = []

    # =========================================================================
    # Public Interface
    # =========================================================================

    @property
    def symbols(self) -> SymbolTable:
        return self._symbols

    def reset(self, source_lines: Optional[list[str]] = None) -> None:
        """Forget the previous program and start from a fresh symbol table."""
        self._symbols = SymbolTable()
        self._encoded = []
        self._source_lines = source_lines or []

    def generate(self, instructions: list[Instruction],
                 source_lines: Optional[list[str]] = None) -> list[int]:
        """
        Run both passes over a program.

        Args:
            instructions: Parsed instructions in program order
            source_lines: Source text split into lines (for error context)

        Returns:
            Machine words in program order

        Raises:
            DuplicateSymbolError: If a label is declared twice (and
                                  duplicates are not allowed)
            EncodeError: If an instruction cannot be encoded
        """
        self.reset(source_lines)

        self.assign_addresses(instructions)
        return self.resolve_and_encode(instructions)

    def assign_addresses(self, instructions: list[Instruction]) -> int:
        """
        First pass: bind every label to a ROM address.

        Args:
            instructions: Parsed instructions in program order

        Returns:
            Number of ROM words the program occupies
        """
        rom_address = 0

        for instruction in instructions:
            if isinstance(instruction, LabelDecl):
                self._define_label(instruction, rom_address)
            else:
                rom_address += 1

        logger.debug(f"Pass 1: {len(self._symbols.labels())} labels, {rom_address} instructions")
        return rom_address

    def resolve_and_encode(self, instructions: list[Instruction]) -> list[int]:
        """
        Second pass: resolve symbols and encode every instruction.

        Args:
            instructions: The instruction list already seen by pass 1

        Returns:
            Machine words in program order
        """
        words: list[int] = []

        for instruction in instructions:
            word = self.encode_instruction(instruction)
            if word is None:
                continue
            self._encoded.append(EncodedWord(len(words), word, instruction))
            words.append(word)

        logger.debug(
            f"Pass 2: {len(words)} words, "
            f"{len(self._symbols.variables())} variables allocated"
        )
        return words

    def encode_instruction(self, instruction: Instruction) -> Optional[int]:
        """
        Encode a single instruction.

        Returns:
            The machine word, or None for label declarations
        """
        if isinstance(instruction, LabelDecl):
            return None
        if isinstance(instruction, AddressInstr):
            return self._encode_address(instruction)
        if isinstance(instruction, ComputeInstr):
            return self._encode_compute(instruction)
        raise EncodeError(
            f"cannot encode {type(instruction).__name__}",
            instruction.location,
        )

    def get_words(self) -> list[int]:
        return [entry.word for entry in self._encoded]

    def get_encoded(self) -> list[EncodedWord]:
        """Emitted words with their ROM addresses and source instructions."""
        return list(self._encoded)

    def get_text(self) -> str:
        """
        Render the program in .hack format.

        Returns:
            One 16-digit binary line per word, each ending in a newline
        """
        return "".join(f"{entry.binary}\n" for entry in self._encoded)

    def get_symbols(self) -> dict[str, int]:
        """
        Get the user symbols of the last run.

        Returns:
            Dictionary mapping label and variable names to addresses
        """
        user_symbols: list[Symbol] = self._symbols.labels() + self._symbols.variables()
        return {sym.name: sym.address for sym in user_symbols}

    # =========================================================================
    # Pass 1 Helpers
    # =========================================================================

    def _define_label(self, label: LabelDecl, rom_address: int) -> None:
        if self._symbols.add_label(label.name, rom_address, label.location):
            return

        existing = self._symbols.get_label(label.name)
        if self._allow_duplicate_labels:
            logger.warning(
                f"{label.location}: duplicate label '{label.name}' ignored, "
                f"keeping address {existing.address}"
            )
            return

        raise DuplicateSymbolError(
            label.name,
            location=label.location,
            original_location=existing.location,
            source_line=self._source_line(label.location),
        )

    # =========================================================================
    # Pass 2 Helpers
    # =========================================================================

    def _encode_address(self, instruction: AddressInstr) -> int:
        """Encode @value / @symbol as the plain 16-bit address."""
        if instruction.is_symbolic:
            return self._symbols.address_for(instruction.operand, instruction.location)

        value = instruction.operand
        if value > WORD_MAX:
            raise self._error(
                f"address {value} is greater than the 16-bit address width",
                instruction.location,
                hint=f"A-instruction values must be between 0 and {WORD_MAX}",
            )

        if value >= A_INSTRUCTION_LIMIT:
            logger.warning(
                f"{instruction.location}: address {value} sets the opcode bit "
                f"and will execute as a C-instruction"
            )

        return value

    def _encode_compute(self, instruction: ComputeInstr) -> int:
        """Encode dest=comp;jump as 111a cccc ccdd djjj."""
        a_bit = 1 if instruction.comp.references_memory() else 0
        comp = self._comp_bits(instruction.comp, instruction.location)
        dest = self._dest_bits(instruction.dest, instruction.location)
        jump = self._jump_bits(instruction.jump, instruction.location)

        return (
            C_PREFIX
            | (a_bit << A_BIT_SHIFT)
            | (comp << COMP_SHIFT)
            | (dest << DEST_SHIFT)
            | jump
        )

    def _comp_bits(self, comp: Expression, location: SourceLocation) -> int:
        for token in comp.operands:
            if token.type not in (TokenType.REGISTER, TokenType.NUMBER):
                raise self._error(f"invalid operand '{token.text}' in computation", location)

        bits = get_comp_bits(comp.text)
        if bits is None:
            raise self._error(
                f"invalid computation '{comp.text}'",
                location,
                hint="see the Hack ALU table, e.g. D+1, M-D, D&A, !M",
            )
        return bits

    def _dest_bits(self, dest: frozenset[str], location: SourceLocation) -> int:
        bits = 0
        for register in dest:
            if register not in DEST_BITS:
                raise self._error(f"invalid destination '{register}'", location)
            bits |= DEST_BITS[register]
        return bits

    def _jump_bits(self, jump: Optional[str], location: SourceLocation) -> int:
        if jump not in JUMP_TABLE:
            raise self._error(f"invalid jump '{jump}'", location)
        return JUMP_TABLE[jump]

    # =========================================================================
    # Error Helpers
    # =========================================================================

    def _source_line(self, location: SourceLocation) -> Optional[str]:
        if 0 < location.line <= len(self._source_lines):
            return self._source_lines[location.line - 1]
        return None

    def _error(self, message: str, location: SourceLocation,
               hint: Optional[str] = None) -> EncodeError:
        return EncodeError(message, location, hint=hint,
                           source_line=self._source_line(location))
