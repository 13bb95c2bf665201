"""
Hack Assembler - Main Interface
===============================

This module provides the Assembler class, the primary interface for
assembling Hack source code. It coordinates the lexer, parser and code
generator to produce a .hack machine code image.

Example Usage
-------------
>>> from hack_asm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> words = asm.assemble_string('''
... // Computes R0 = 2 + 3
...     @2
...     D=A
...     @3
...     D=D+A
...     @0
...     M=D
... ''')
>>> len(words)
6
>>> print(asm.get_text(), end="")
0000000000000010
1110110000010000
0000000000000011
1110000010010000
0000000000000000
1110001100001000
>>> asm.write_hack("Add.hack").name
'Add.hack'

Command-Line Usage
------------------
    $ hackasm Add.asm -l Add.lst -s Add.sym

Options:
    -o, --output FILE          Output .hack file (default: input.hack)
    -l, --listing FILE         Generate listing file
    -s, --symbols FILE         Generate symbol file
    --allow-duplicate-labels   Keep the first address of a repeated label
    -v, --verbose              Verbose output
"""

from pathlib import Path
from typing import Optional
import logging

from hack_asm.assembler.lexer import Lexer, split_lines
from hack_asm.assembler.parser import Parser, Instruction
from hack_asm.assembler.codegen import CodeGenerator
from hack_asm.errors import AssemblerError

logger = logging.getLogger(__name__)

# Extension of the machine code image
HACK_SUFFIX = ".hack"


class Assembler:
    """
    Main Hack assembler class.

    Assembly is all-or-nothing: a failed run raises AssemblerError and
    leaves no program behind, so the write_* methods refuse to run until
    an assembly has succeeded.

    Attributes:
        verbose: If True, log progress at INFO level
        allow_duplicate_labels: If True, repeated labels keep their first
                                address instead of failing assembly
    """

    def __init__(self, verbose: bool = False, allow_duplicate_labels: bool = False):
        """
        Initialize the assembler.

        Args:
            verbose: Log each pipeline stage at INFO level
            allow_duplicate_labels: Accept a label declared more than once,
                                    binding it to its first declaration
        """
        self._verbose = verbose
        self._allow_duplicate_labels = allow_duplicate_labels
        self._codegen = CodeGenerator(allow_duplicate_labels=allow_duplicate_labels)
        self._instructions: list[Instruction] = []
        self._source_lines: list[str] = []
        self._source_file: Optional[Path] = None
        self._assembled = False

    def _log(self, message: str) -> None:
        if self._verbose:
            logger.info(message)
        else:
            logger.debug(message)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble(self, source: str, filename: str = "<input>") -> str:
        """
        Assemble source code and return the .hack text.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            One 16-digit binary line per machine word
        """
        self.assemble_string(source, filename)
        return self.get_text()

    def assemble_string(self, source: str, filename: str = "<input>") -> list[int]:
        """
        Assemble source code from a string.

        The assembly pipeline is:
        1. Tokenize every line (lexer)
        2. Parse tokens into instructions (parser)
        3. Assign label addresses, then resolve and encode (code generator)

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            Machine words in program order

        Raises:
            AssemblerError: If assembly fails. The previous program is
                            discarded either way.
        """
        self._assembled = False
        self._instructions = []
        self._source_lines = split_lines(source)
        self._codegen.reset(self._source_lines)

        try:
            tokens = Lexer(source, filename).tokenize()
            self._log(f"Scanned {len(tokens)} tokens")

            instructions = Parser(tokens, filename, self._source_lines).parse()
            self._log(f"Parsed {len(instructions)} instructions")

            words = self._codegen.generate(instructions, self._source_lines)
        except AssemblerError:
            # Drop any words pass 2 emitted before failing
            self._codegen.reset()
            raise

        self._log(
            f"Generated {len(words)} words "
            f"({len(self._codegen.symbols.labels())} labels, "
            f"{len(self._codegen.symbols.variables())} variables)"
        )

        self._instructions = instructions
        self._assembled = True
        return words

    def assemble_file(self, filepath: str | Path) -> list[int]:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            Machine words in program order

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        self._source_file = filepath

        self._log(f"Assembling {filepath}...")
        self._assembled = False
        self._instructions = []
        self._codegen.reset()
        source = filepath.read_text(encoding="utf-8")

        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_instructions(self) -> list[Instruction]:
        return list(self._instructions)

    def get_words(self) -> list[int]:
        """
        Get the generated machine words.

        Returns:
            Machine words in program order
        """
        return self._codegen.get_words()

    def get_text(self) -> str:
        """Get the program in .hack text format."""
        return self._codegen.get_text()

    def get_symbols(self) -> dict[str, int]:
        """
        Get the user symbol table.

        Returns:
            Dictionary mapping labels and variables to their addresses
        """
        return self._codegen.get_symbols()

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            ROM address, machine word and source line for every emitted
            word, followed by the user symbol table
        """
        lines = []
        lines.append("Hack Assembler Listing")
        lines.append("=" * 60)
        lines.append("")
        lines.append("Addr   Code              Line  Source")
        lines.append("-" * 60)
        for entry in self._codegen.get_encoded():
            line_no = entry.instruction.location.line
            source = ""
            if 0 < line_no <= len(self._source_lines):
                source = self._source_lines[line_no - 1].strip()
            lines.append(f"{entry.address:05d}  {entry.binary}  {line_no:4d}  {source}")
        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for name, address in self._sorted_symbols():
            lines.append(f"{name:20s} = {address}")
        return "\n".join(lines) + "\n"

    def default_output_path(self, source: str | Path | None = None) -> Path:
        """
        Derive the .hack path that sits next to a source file.

        Args:
            source: Source path (default: the last assembled file)
        """
        source = Path(source) if source is not None else self._source_file
        if source is None:
            raise AssemblerError("no source file to derive an output path from")
        return source.with_suffix(HACK_SUFFIX)

    def write_hack(self, filepath: str | Path | None = None) -> Path:
        """
        Write the machine code image.

        Args:
            filepath: Output path (default: source path with .hack suffix)

        Returns:
            The path written
        """
        self._require_success()
        path = Path(filepath) if filepath is not None else self.default_output_path()
        path.write_text(self.get_text(), encoding="utf-8")
        self._log(f"Wrote {len(self.get_words())} words to {path}")
        return path

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        The listing shows addresses, generated words, and source lines.
        """
        self._require_success()
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.get_listing())

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name address (one per line, ordered by address)
        """
        self._require_success()
        with open(filepath, "w", encoding="utf-8") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by hackasm\n")
            for name, address in self._sorted_symbols():
                f.write(f"{name} {address}\n")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _sorted_symbols(self) -> list[tuple[str, int]]:
        return sorted(self.get_symbols().items(), key=lambda item: (item[1], item[0]))

    def _require_success(self) -> None:
        if not self._assembled:
            raise AssemblerError("nothing to write: no program has been assembled successfully")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>", **options) -> str:
    """
    Assemble source code and return the .hack text.

    Args:
        source: Assembly source code
        filename: Virtual filename for error messages
        **options: Passed to Assembler()
    """
    return Assembler(**options).assemble(source, filename)


def assemble_file(filepath: str | Path, output: str | Path | None = None,
                  **options) -> Path:
    """
    Assemble a file and write the .hack image next to it.

    Args:
        filepath: Source path
        output: Output path (default: source path with .hack suffix)
        **options: Passed to Assembler()

    Returns:
        The path written
    """
    asm = Assembler(**options)
    asm.assemble_file(filepath)
    return asm.write_hack(output)
