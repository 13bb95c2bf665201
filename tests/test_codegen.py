# =============================================================================
# test_codegen.py - Code Generator Unit Tests
# =============================================================================
# Tests for the two-pass Hack code generator.
#
# Test coverage includes:
#   - A-instruction encoding and the 16-bit range check
#   - Every entry of the ALU computation table, with A and M
#   - Destination and jump fields
#   - Pass 1 label addresses and forward references
#   - Variable allocation in pass 2
#   - Duplicate label handling
# =============================================================================

import logging

import pytest
from hack_asm.assembler.codegen import CodeGenerator
from hack_asm.assembler.parser import parse_source, AddressInstr, LabelDecl
from hack_asm.errors import EncodeError, DuplicateSymbolError, SourceLocation


def encode(source: str, **options) -> list[str]:
    """Assemble source and return the binary lines."""
    codegen = CodeGenerator(**options)
    codegen.generate(parse_source(source, "<test>"))
    return codegen.get_text().splitlines()


def encode_one(source: str) -> str:
    lines = encode(source)
    assert len(lines) == 1
    return lines[0]


# =============================================================================
# A-Instruction Tests
# =============================================================================

class TestAddressEncoding:
    """Test @value encoding."""

    def test_small_address(self):
        """Literal addresses encode as plain binary."""
        assert encode_one("@21") == "0000000000010101"

    def test_zero(self):
        """@0 is all zeros."""
        assert encode_one("@0") == "0000000000000000"

    def test_largest_15_bit_address(self):
        """32767 keeps the top bit clear."""
        assert encode_one("@32767") == "0111111111111111"

    def test_largest_16_bit_address(self):
        """65535 is the largest accepted value."""
        assert encode_one("@65535") == "1111111111111111"

    def test_address_out_of_range(self):
        """65536 does not fit in a word."""
        with pytest.raises(EncodeError) as exc_info:
            encode("@65536")
        assert "16-bit" in str(exc_info.value)

    def test_opcode_bit_warning(self, caplog):
        """Values with the top bit set are logged."""
        with caplog.at_level(logging.WARNING):
            encode("@40000")
        assert "C-instruction" in caplog.text

    @pytest.mark.parametrize("name,binary", [
        ("SCREEN", "0100000000000000"),
        ("KBD", "0110000000000000"),
        ("R3", "0000000000000011"),
        ("SP", "0000000000000000"),
        ("THAT", "0000000000000100"),
    ])
    def test_predefined_symbols(self, name, binary):
        """Predefined symbols encode to their fixed addresses."""
        assert encode_one(f"@{name}") == binary


# =============================================================================
# C-Instruction Tests
# =============================================================================

COMP_CASES = [
    ("0", "0101010"),
    ("1", "0111111"),
    ("-1", "0111010"),
    ("D", "0001100"),
    ("A", "0110000"),
    ("M", "1110000"),
    ("!D", "0001101"),
    ("!A", "0110001"),
    ("!M", "1110001"),
    ("-D", "0001111"),
    ("-A", "0110011"),
    ("-M", "1110011"),
    ("D+1", "0011111"),
    ("A+1", "0110111"),
    ("M+1", "1110111"),
    ("D-1", "0001110"),
    ("A-1", "0110010"),
    ("M-1", "1110010"),
    ("D+A", "0000010"),
    ("D+M", "1000010"),
    ("D-A", "0010011"),
    ("D-M", "1010011"),
    ("A-D", "0000111"),
    ("M-D", "1000111"),
    ("D&A", "0000000"),
    ("D&M", "1000000"),
    ("D|A", "0010101"),
    ("D|M", "1010101"),
]


class TestComputeEncoding:
    """Test dest=comp;jump encoding."""

    @pytest.mark.parametrize("comp,bits", COMP_CASES)
    def test_comp_table(self, comp, bits):
        """a bit plus c1..c6 for every legal computation."""
        assert encode_one(comp) == f"111{bits}000000"

    def test_d_plus_one(self):
        """D+1 with no dest or jump."""
        assert encode_one("D+1") == "1110011111000000"

    def test_unconditional_jump(self):
        """0;JMP sets all three jump bits."""
        assert encode_one("0;JMP") == "1110101010000111"

    def test_increment_memory(self):
        """M=M+1 sets the a bit and dest M."""
        assert encode_one("M=M+1") == "1111110111001000"

    @pytest.mark.parametrize("dest,bits", [
        ("M", "001"),
        ("D", "010"),
        ("MD", "011"),
        ("DM", "011"),
        ("A", "100"),
        ("AM", "101"),
        ("AD", "110"),
        ("AMD", "111"),
        ("DAM", "111"),
    ])
    def test_dest_bits(self, dest, bits):
        """Destination order does not matter."""
        assert encode_one(f"{dest}=0") == f"1110101010{bits}000"

    @pytest.mark.parametrize("jump,bits", [
        ("JGT", "001"),
        ("JEQ", "010"),
        ("JGE", "011"),
        ("JLT", "100"),
        ("JNE", "101"),
        ("JLE", "110"),
        ("JMP", "111"),
    ])
    def test_jump_bits(self, jump, bits):
        """Each jump mnemonic has its own bits."""
        assert encode_one(f"D;{jump}") == f"1110001100000{bits}"

    @pytest.mark.parametrize("comp", ["A+D", "M+D", "A&D", "1+D", "A+M", "D-D", "-0", "!1", "0+1"])
    def test_invalid_computation(self, comp):
        """Operand orders missing from the ALU table are rejected."""
        with pytest.raises(EncodeError) as exc_info:
            encode(f"D={comp}")
        assert comp in str(exc_info.value)

    def test_invalid_computation_reports_line(self):
        """Encode errors point at the failing statement."""
        with pytest.raises(EncodeError) as exc_info:
            encode("@1\nD=A+D\n")
        assert exc_info.value.line == 2


# =============================================================================
# Two-Pass Tests
# =============================================================================

class TestTwoPass:
    """Test label binding and symbol resolution across both passes."""

    def test_forward_reference(self):
        """A label used before its declaration resolves."""
        lines = encode("@LOOP\n(LOOP)\n0;JMP\n")
        assert lines[0] == "0000000000000001"

    def test_forward_reference_without_following_instruction(self):
        """A trailing label points one past the last instruction."""
        assert encode("@END\n(END)\n") == ["0000000000000001"]

    def test_backward_reference(self):
        """A label declared first resolves to address 0."""
        lines = encode("(TOP)\n@TOP\n0;JMP\n")
        assert lines[0] == "0000000000000000"

    def test_labels_take_no_address(self):
        """Consecutive labels share the next instruction's address."""
        codegen = CodeGenerator()
        instructions = parse_source("(A1)\n(A2)\n@1\n(A3)\nD=A\n(A4)\n")
        assert codegen.assign_addresses(instructions) == 2
        symbols = {s.name: s.address for s in codegen.symbols.labels()}
        assert symbols == {"A1": 0, "A2": 0, "A3": 1, "A4": 2}

    def test_variables_from_16(self):
        """Variables are allocated from 16 in first-use order."""
        lines = encode("@i\n@sum\n@i\n")
        assert lines == ["0000000000010000", "0000000000010001", "0000000000010000"]

    def test_label_is_not_allocated_as_variable(self):
        """A forward label does not consume a variable slot."""
        lines = encode("@x\n@LOOP\n(LOOP)\n@y\n")
        assert lines == ["0000000000010000", "0000000000000010", "0000000000010001"]

    def test_output_line_count(self):
        """One word per non-label instruction."""
        instructions = parse_source("(START)\n@1\nD=A\n(MID)\n@2\n(END)\n0;JMP\n")
        codegen = CodeGenerator()
        words = codegen.generate(instructions)
        expected = sum(1 for i in instructions if not isinstance(i, LabelDecl))
        assert len(words) == expected == 4

    def test_generate_resets_state(self):
        """Each generate() starts with a fresh symbol table."""
        codegen = CodeGenerator()
        codegen.generate(parse_source("@a\n@b\n"))
        codegen.generate(parse_source("@c\n"))
        assert codegen.get_words() == [16]
        assert codegen.get_symbols() == {"c": 16}

    def test_encoded_addresses(self):
        """Encoded words keep their ROM address and instruction."""
        codegen = CodeGenerator()
        codegen.generate(parse_source("(X)\n@1\n(Y)\nD=A\n"))
        assert [e.address for e in codegen.get_encoded()] == [0, 1]
        assert isinstance(codegen.get_encoded()[0].instruction, AddressInstr)

    def test_get_symbols_excludes_predefined(self):
        """Only user symbols are reported."""
        codegen = CodeGenerator()
        codegen.generate(parse_source("@R0\n@SCREEN\n(L)\n@v\n"))
        assert codegen.get_symbols() == {"L": 2, "v": 16}

    def test_text_is_newline_terminated(self):
        """Every output line ends with a newline."""
        codegen = CodeGenerator()
        codegen.generate(parse_source("@1\n@2\n"))
        assert codegen.get_text() == "0000000000000001\n0000000000000010\n"

    def test_empty_program(self):
        """No instructions gives no output."""
        codegen = CodeGenerator()
        assert codegen.generate([]) == []
        assert codegen.get_text() == ""

    def test_encode_instruction_directly(self):
        """Labels encode to nothing and literals to themselves."""
        codegen = CodeGenerator()
        location = SourceLocation("<test>", 1)
        assert codegen.encode_instruction(LabelDecl(location, "X")) is None
        assert codegen.encode_instruction(AddressInstr(location, 5)) == 5


# =============================================================================
# Duplicate Label Tests
# =============================================================================

class TestDuplicateLabels:
    """Test repeated label declarations."""

    SOURCE = "(LOOP)\n@1\n(LOOP)\n@LOOP\n"

    def test_duplicate_is_error_by_default(self):
        """A repeated label reports both declarations."""
        with pytest.raises(DuplicateSymbolError) as exc_info:
            encode(self.SOURCE)
        error = exc_info.value
        assert error.symbol == "LOOP"
        assert error.line == 3
        assert error.original_location.line == 1

    def test_duplicate_allowed_keeps_first_address(self, caplog):
        """Allowed duplicates warn and bind to the first address."""
        with caplog.at_level(logging.WARNING):
            lines = encode(self.SOURCE, allow_duplicate_labels=True)
        assert lines == ["0000000000000001", "0000000000000000"]
        assert "duplicate label" in caplog.text


class TestReset:
    """Test discarding a generated program."""

    def test_reset_clears_program(self):
        """reset() empties the words and user symbols of the last run."""
        codegen = CodeGenerator()
        codegen.generate(parse_source("(L)\n@v\n"))
        codegen.reset()
        assert codegen.get_words() == []
        assert codegen.get_symbols() == {}
        assert codegen.symbols.next_variable_address == 16
