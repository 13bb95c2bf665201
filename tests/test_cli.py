# =============================================================================
# test_cli.py - hackasm Command-Line Tests
# =============================================================================
# Tests for the hackasm command.
#
# Test coverage includes:
#   - Help and version output
#   - Default and explicit output paths
#   - Listing and symbol files
#   - Exit codes for assembly errors and bad arguments
# =============================================================================

import logging

import pytest
from click.testing import CliRunner

from hack_asm import __version__
from hack_asm.cli.errors import ExitCode
from hack_asm.cli.hackasm import main


PROGRAM = """\
// Adds R0 to itself forever
(LOOP)
    @R0
    D=M
    @sum
    M=D+M
    @LOOP
    0;JMP
"""


@pytest.fixture(autouse=True)
def drop_cli_log_handler():
    """Remove the stderr handler each command run installs on the root logger."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(logging.WARNING)


def write_source(tmp_path, text=PROGRAM, name="Prog.asm"):
    path = tmp_path / name
    path.write_text(text)
    return path


class TestHackasmCommand:
    """Test the hackasm entry point."""

    def test_help(self):
        """--help documents the arguments."""
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "INPUT_FILE" in result.output
        assert "--allow-duplicate-labels" in result.output

    def test_version(self):
        """--version prints the package version."""
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_default_output(self, tmp_path):
        """Without -o the image is written next to the input."""
        source = write_source(tmp_path)
        runner = CliRunner()
        result = runner.invoke(main, [str(source)])
        assert result.exit_code == 0
        lines = (tmp_path / "Prog.hack").read_text().splitlines()
        assert len(lines) == 6
        assert lines[0] == "0000000000000000"
        assert lines[2] == "0000000000010000"

    def test_explicit_output(self, tmp_path):
        """-o writes only the named file."""
        source = write_source(tmp_path)
        output = tmp_path / "out.hack"
        runner = CliRunner()
        result = runner.invoke(main, [str(source), "-o", str(output)])
        assert result.exit_code == 0
        assert output.exists()
        assert not (tmp_path / "Prog.hack").exists()

    def test_listing_and_symbols(self, tmp_path):
        """-l and -s write the listing and symbol files."""
        source = write_source(tmp_path)
        listing = tmp_path / "Prog.lst"
        symbols = tmp_path / "Prog.sym"
        runner = CliRunner()
        result = runner.invoke(
            main, [str(source), "-l", str(listing), "-s", str(symbols)]
        )
        assert result.exit_code == 0
        assert "Symbol Table" in listing.read_text()
        assert "LOOP 0" in symbols.read_text()
        assert "sum 16" in symbols.read_text()

    def test_verbose(self, tmp_path):
        """-v reports progress."""
        source = write_source(tmp_path)
        runner = CliRunner()
        result = runner.invoke(main, ["-v", str(source)])
        assert result.exit_code == 0
        assert "Assembly complete: 6 instructions" in result.output

    def test_assembly_error(self, tmp_path):
        """An assembly error exits 1 and writes nothing."""
        source = write_source(tmp_path, "@1\nD=A+D\n")
        runner = CliRunner()
        result = runner.invoke(main, [str(source)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "Assembly error:" in result.output
        assert "invalid computation 'A+D'" in result.output
        assert not (tmp_path / "Prog.hack").exists()

    def test_duplicate_label_error(self, tmp_path):
        """Duplicate labels fail by default."""
        source = write_source(tmp_path, "(X)\n@X\n(X)\n")
        runner = CliRunner()
        result = runner.invoke(main, [str(source)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "duplicate label 'X'" in result.output

    def test_allow_duplicate_labels(self, tmp_path):
        """--allow-duplicate-labels keeps the first address."""
        source = write_source(tmp_path, "(X)\n@X\n(X)\n")
        runner = CliRunner()
        result = runner.invoke(main, [str(source), "--allow-duplicate-labels"])
        assert result.exit_code == 0
        assert (tmp_path / "Prog.hack").read_text() == "0000000000000000\n"

    def test_missing_input(self, tmp_path):
        """A missing input file is a usage error."""
        runner = CliRunner()
        result = runner.invoke(main, [str(tmp_path / "missing.asm")])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_invalid_utf8(self, tmp_path):
        """Undecodable input is a usage error."""
        source = tmp_path / "Bin.asm"
        source.write_bytes(b"@1\n\xff\xfe\n")
        runner = CliRunner()
        result = runner.invoke(main, [str(source)])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert not (tmp_path / "Bin.hack").exists()

    def test_warnings_shown_by_default(self, tmp_path):
        """Warnings reach stderr without -v."""
        source = write_source(tmp_path, "@40000\n")
        runner = CliRunner()
        result = runner.invoke(main, [str(source)])
        assert result.exit_code == 0
        assert "WARNING:" in result.output
        assert "C-instruction" in result.output

    def test_debug_hidden_by_default(self, tmp_path):
        """Stage summaries are only logged with -v."""
        source = write_source(tmp_path)
        runner = CliRunner()
        result = runner.invoke(main, [str(source)])
        assert result.exit_code == 0
        assert "DEBUG:" not in result.output

    def test_verbose_logs_debug(self, tmp_path):
        """-v turns on DEBUG records with a level prefix."""
        source = write_source(tmp_path)
        runner = CliRunner()
        result = runner.invoke(main, ["-v", str(source)])
        assert result.exit_code == 0
        assert "DEBUG: Scanned" in result.output
