"""
Hack Symbol Table
=================

Maps symbolic names to 16-bit addresses. Three kinds of symbol share one
lookup surface, searched in this order:

1. **Predefined** symbols (SP, LCL, ARG, THIS, THAT, R0-R15, SCREEN, KBD),
   seeded when the table is created.
2. **Labels**, bound to ROM addresses during the first pass.
3. **Variables**, bound to RAM addresses from 16 upwards the first time an
   unknown name is looked up during the second pass.

Once a name has an address it keeps it for the rest of the run.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional
import logging

from hack_asm.cpu import PREDEFINED_SYMBOLS, VARIABLE_BASE
from hack_asm.errors import SourceLocation

logger = logging.getLogger(__name__)

# First RAM address past the variable area
VARIABLE_LIMIT = PREDEFINED_SYMBOLS["SCREEN"]


class SymbolKind(Enum):
    """Which namespace a symbol lives in."""
    PREDEFINED = auto()
    LABEL = auto()
    VARIABLE = auto()


@dataclass
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Symbol name
        address: ROM address (labels) or RAM address (everything else)
        kind: Namespace of the symbol
        location: Where the label was declared or the variable first used
    """
    name: str
    address: int
    kind: SymbolKind
    location: Optional[SourceLocation] = None


class SymbolTable:
    """
    Symbol table for one assembly run.

    Usage:
        table = SymbolTable()
        table.add_label("LOOP", 4)
        table.address_for("LOOP")    # 4
        table.address_for("i")       # 16, allocated on first use
        table.address_for("i")       # 16 again
    """

    def __init__(self):
        self._predefined: dict[str, int] = dict(PREDEFINED_SYMBOLS)
        self._labels: dict[str, Symbol] = {}
        self._variables: dict[str, Symbol] = {}
        self._next_variable = VARIABLE_BASE

    def __contains__(self, name: str) -> bool:
        return self.contains(name)

    def __len__(self) -> int:
        return len(self._predefined) + len(self._labels) + len(self._variables)

    # =========================================================================
    # Mutation
    # =========================================================================

    def add_label(self, name: str, address: int,
                  location: Optional[SourceLocation] = None) -> bool:
        """
        Record a label's ROM address.

        A label that is already recorded keeps its first address.

        Args:
            name: Label name
            address: ROM address of the instruction following the label
            location: Where the label is declared

        Returns:
            True if the label was recorded, False if it already existed
        """
        if name in self._labels:
            return False

        if name in self._predefined:
            logger.warning(f"label '{name}' is shadowed by the predefined symbol of the same name")

        self._labels[name] = Symbol(name, address, SymbolKind.LABEL, location)
        return True

    def address_for(self, name: str, location: Optional[SourceLocation] = None) -> int:
        """
        Resolve a name to its address.

        Unknown names are never an error: they become variables and get the
        next free RAM address.

        Args:
            name: Symbol name
            location: Where the name is referenced (recorded for new variables)

        Returns:
            The symbol's 16-bit address
        """
        if name in self._predefined:
            return self._predefined[name]

        symbol = self._labels.get(name) or self._variables.get(name)
        if symbol is not None:
            return symbol.address

        address = self._next_variable
        self._next_variable += 1
        self._variables[name] = Symbol(name, address, SymbolKind.VARIABLE, location)

        if address == VARIABLE_LIMIT:
            logger.warning(f"variable '{name}' allocated at {address}, inside screen memory")

        return address

    # =========================================================================
    # Queries
    # =========================================================================

    def contains(self, name: str) -> bool:
        """Check if a name already has an address (without allocating one)."""
        return name in self._predefined or name in self._labels or name in self._variables

    def is_predefined(self, name: str) -> bool:
        return name in self._predefined

    def get_label(self, name: str) -> Optional[Symbol]:
        return self._labels.get(name)

    def labels(self) -> list[Symbol]:
        """User labels in declaration order."""
        return list(self._labels.values())

    def variables(self) -> list[Symbol]:
        """User variables in allocation order."""
        return list(self._variables.values())

    @property
    def next_variable_address(self) -> int:
        """RAM address the next new variable will receive."""
        return self._next_variable
