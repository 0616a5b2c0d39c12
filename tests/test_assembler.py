# =============================================================================
# test_assembler.py - Full Assembler Integration Tests
# =============================================================================
# End-to-end integration tests for the complete C6461 assembler.
# These tests verify the full pipeline from source text to listing and
# load output.
#
# Test coverage includes:
#   - The sample programs (A, B and C)
#   - Forward references and Data words holding label addresses
#   - Label redefinition
#   - Idempotence
#   - Output files (listing, load, symbols)
#   - Warnings treated as errors
#   - 16-bit address limit
# =============================================================================

from pathlib import Path

import pytest

from c6461_asm import (
    Assembler,
    AssemblerError,
    DirectiveError,
    UnknownOpcodeError,
    WarningsAsErrors,
    assemble,
    assemble_file,
)


EXAMPLES_DIR = Path(__file__).resolve().parent.parent / "examples"

PROGRAM_A = """\
; Program A - simple arithmetic/data operations
LOC 10
START:  LDR 0,0,100        ; R0 <- M[100]
        LDR 1,0,101        ; R1 <- M[101]
        AMR 0,0,102        ; R0 <- R0 + M[102]
        AIR 1,5            ; R1 <- R1 + 5
        MLT 0,1            ; R0 <- R0 * R1
        STR 0,0,103        ; M[103] <- R0
        HLT

; Data region
LOC 100
D1: Data 7
D2: Data 3
D3: Data 2
D4: Data 0
"""

PROGRAM_A_LOAD = [
    "000012 002004",
    "000013 002405",
    "000014 010006",
    "000015 014405",
    "000016 160100",
    "000017 004007",
    "000020 000000",
    "000144 000007",
    "000145 000003",
    "000146 000002",
    "000147 000000",
]

PROGRAM_B_LOAD = [
    "000050 002034",
    "000051 020020",
    "000052 014001",
    "000053 022032",
    "000054 000000",
    "000074 000000",
    "000120 002434",
    "000121 144404",
    "000122 000000",
    "000132 000000",
]


# =============================================================================
# Full Assembly Pipeline Tests
# =============================================================================

class TestFullPipeline:
    """Test the complete assembly pipeline from source to load file."""

    def test_minimal_program(self):
        result = Assembler().assemble("HLT")
        assert result.load_lines == ["000000 000000"]

    def test_program_a(self):
        result = assemble(PROGRAM_A)
        assert result.load_lines == PROGRAM_A_LOAD
        assert result.symbols == {
            "START": 10, "D1": 100, "D2": 101, "D3": 102, "D4": 103,
        }

    def test_program_a_first_word(self):
        source = "LOC 10\nSTART: LDR 0,0,100\nLOC 100\nD1: Data 7"
        result = assemble(source)
        word = result.words[0]
        assert word.address == 10
        assert word.word >> 10 == 0o01
        assert word.word & 0x1F == 4
        assert result.symbols == {"START": 10, "D1": 100}

    def test_program_a_truncation_warnings(self):
        result = assemble(PROGRAM_A)
        assert len(result.warnings) == 4
        assert [w.line for w in result.warnings] == [3, 4, 5, 8]

    def test_listing_has_every_line(self):
        result = assemble(PROGRAM_A)
        assert len(result.listing_lines) == len(PROGRAM_A.splitlines())
        assert len(result.load_lines) == 11
        assert result.listing_lines[0] == "        ; Program A - simple arithmetic/data operations"
        assert result.listing_lines[2].startswith("000012 002004 START:")

    def test_listing_and_load_text(self):
        result = assemble("HLT")
        assert result.listing == "000000 000000 HLT\n"
        assert result.load == "000000 000000\n"

    def test_empty_source(self):
        result = assemble("")
        assert result.words == []
        assert result.load == ""


# =============================================================================
# Label Handling
# =============================================================================

class TestLabels:
    """Test forward references, Data labels and redefinition."""

    def test_forward_reference(self):
        source = """\
        JZ 0,0,LATER
        HLT
LATER:  HLT
"""
        result = assemble(source)
        assert result.symbols["LATER"] == 2
        assert result.words[0].word == (0o10 << 10) | 2

    def test_data_label(self):
        source = "LOC 5\nX: HLT\nPTR: Data X"
        result = assemble(source)
        assert result.words[1].word == 5
        assert result.words[1].address == 6

    def test_redefinition_last_writer_wins(self):
        source = "A: Data 1\nA: Data 2\n   LDR 0,0,A"
        result = assemble(source)
        assert result.symbols["A"] == 1
        assert result.words[2].word == (1 << 10) | 1
        assert len(result.warnings) == 1
        assert "label redefined: 'A'" in result.warnings[0].message
        assert result.warnings[0].line == 2

    def test_undefined_label_is_fatal(self):
        with pytest.raises(AssemblerError) as exc_info:
            assemble("HLT\nJZ 0,0,NOWHERE")
        assert exc_info.value.line == 2


# =============================================================================
# Address Range
# =============================================================================

class TestAddressRange:
    """Test the 16-bit limit on word addresses."""

    def test_loc_above_16_bits_is_fatal(self):
        with pytest.raises(DirectiveError):
            assemble("LOC 65536\nHLT")

    def test_address_wrap_warns(self):
        result = assemble("LOC 65535\nHLT\nHLT")
        assert result.load_lines == ["177777 000000", "000000 000000"]
        assert len(result.warnings) == 1
        assert result.warnings[0].line == 3


# =============================================================================
# Assembler Facade
# =============================================================================

class TestAssemblerFacade:
    """Test the Assembler class methods."""

    def test_idempotent(self):
        asm = Assembler()
        first = asm.assemble_string(PROGRAM_A)
        second = asm.assemble_string(PROGRAM_A)
        assert first.listing == second.listing
        assert first.load == second.load
        assert len(second.warnings) == len(first.warnings)

    def test_assemble_lines(self):
        result = Assembler().assemble_lines(["LOC 3", "HLT"])
        assert result.load_lines == ["000003 000000"]

    def test_getters(self):
        asm = Assembler()
        asm.assemble_string(PROGRAM_A)
        assert asm.get_symbols()["D4"] == 103
        assert len(asm.get_words()) == 11
        assert len(asm.get_records()) == len(PROGRAM_A.splitlines())
        assert asm.get_load().splitlines() == PROGRAM_A_LOAD
        assert asm.has_warnings()
        assert "4 warnings" in asm.get_warning_report()
        assert asm.get_result().symbols == asm.get_symbols()

    def test_output_before_assembly(self):
        with pytest.raises(RuntimeError):
            Assembler().get_listing()

    def test_failed_assembly_clears_result(self):
        asm = Assembler()
        asm.assemble_string("HLT")
        with pytest.raises(UnknownOpcodeError):
            asm.assemble_string("FOO")
        with pytest.raises(RuntimeError):
            asm.get_load()

    def test_strict_flags(self):
        assert Assembler(strict_flags=True).is_strict()
        with pytest.raises(AssemblerError):
            Assembler(strict_flags=True).assemble_string("SRC 0,1,X,A")
        result = Assembler().assemble_string("SRC 0,1,X,A")
        assert len(result.warnings) == 1

    def test_warnings_as_errors(self):
        asm = Assembler(warnings_as_errors=True)
        with pytest.raises(WarningsAsErrors) as exc_info:
            asm.assemble_string("LDR 0,0,100")
        assert len(exc_info.value.warnings) == 1
        assert "1 warning treated as errors" in str(exc_info.value)
        assert len(asm.get_warnings()) == 1

    def test_warnings_as_errors_clean_program(self):
        result = Assembler(warnings_as_errors=True).assemble_string("LDR 0,0,31")
        assert result.warnings == []


# =============================================================================
# Output Files
# =============================================================================

class TestOutputFiles:
    """Test writing listing, load and symbol files."""

    def test_write_listing_and_load(self, tmp_path):
        asm = Assembler()
        asm.assemble_string(PROGRAM_A)
        asm.write_listing(tmp_path / "a.lst")
        asm.write_load(tmp_path / "a.load")

        assert (tmp_path / "a.load").read_text().splitlines() == PROGRAM_A_LOAD
        listing = (tmp_path / "a.lst").read_text().splitlines()
        assert len(listing) == len(PROGRAM_A.splitlines())

    def test_write_symbols(self, tmp_path):
        asm = Assembler()
        asm.assemble_string("LOC 8\nZED: HLT\nALPHA: Data 1")
        asm.write_symbols(tmp_path / "out.sym")

        lines = (tmp_path / "out.sym").read_text().splitlines()
        assert lines[0].startswith("#")
        assert lines[1].startswith("#")
        assert lines[2:] == ["ALPHA 000011", "ZED 000010"]

    def test_assemble_file(self, tmp_path):
        source = tmp_path / "prog.asm"
        source.write_text("LOC 1\nHLT\nFOO\n")
        with pytest.raises(UnknownOpcodeError) as exc_info:
            assemble_file(source)
        assert str(source) in str(exc_info.value)
        assert exc_info.value.line == 3


# =============================================================================
# Sample Programs
# =============================================================================

class TestSamplePrograms:
    """Assemble the programs shipped in examples/."""

    def test_program_a_file(self):
        result = assemble_file(EXAMPLES_DIR / "program_a.asm")
        assert result.load_lines == PROGRAM_A_LOAD

    def test_program_b_file(self):
        result = assemble_file(EXAMPLES_DIR / "program_b.asm")
        assert result.load_lines == PROGRAM_B_LOAD
        assert result.symbols["HANDLER"] == 80
        assert result.symbols["DONE"] == 90
        assert len(result.warnings) == 4

    def test_program_c_file(self):
        result = assemble_file(EXAMPLES_DIR / "program_c.asm")
        assert result.warnings == []
        assert result.symbols == {
            "PTR": 6, "COUNT": 7, "MAIN": 12, "LOOP": 14, "DONE": 20, "TABLE": 28,
        }
        words = {w.address: w.word for w in result.words}
        assert words[6] == 28
        assert words[12] == (0o41 << 10) | (1 << 6) | 7
        assert words[13] == (0o01 << 10) | (1 << 5) | 6
        assert words[18] == (0o11 << 10) | (1 << 8) | 14
