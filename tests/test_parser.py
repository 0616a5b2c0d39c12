# =============================================================================
# test_parser.py - Line Analyzer (Pass 1) Unit Tests
# =============================================================================
# Tests for line classification, address assignment and label definition.
#
# Test coverage includes:
#   - Comment splitting and operand value classification
#   - Blank, comment-only and label-only lines
#   - LOC and Data directives
#   - Location counter threading
#   - Directive errors
# =============================================================================

import pytest

from c6461_asm.assembler.parser import (
    LabelRef,
    LineAnalyzer,
    LineKind,
    Literal,
    analyze_source,
    parse_value,
    split_comment,
)
from c6461_asm.assembler.symbols import SymbolTable
from c6461_asm.errors import DiagnosticLog, DirectiveError


# =============================================================================
# Helper Functions
# =============================================================================

def analyze(source: str):
    """Run pass 1 over `source` and return (records, symbols)."""
    symbols = SymbolTable()
    records = analyze_source(source.splitlines(), symbols, "test.asm")
    return records, symbols


# =============================================================================
# Lexical Helpers
# =============================================================================

class TestSplitComment:
    """Test comment removal."""

    def test_no_comment(self):
        assert split_comment("HLT") == ("HLT", None)

    def test_trailing_comment(self):
        code, comment = split_comment("LDR 0,0,100   ; R0 <- M[100]")
        assert code == "LDR 0,0,100   "
        assert comment == "R0 <- M[100]"

    def test_comment_only(self):
        assert split_comment("; Data region") == ("", "Data region")


class TestParseValue:
    """Test literal / label classification of operand tokens."""

    def test_decimal(self):
        assert parse_value("100") == Literal(100)

    def test_signed_decimal(self):
        assert parse_value("-3") == Literal(-3)
        assert parse_value("+4") == Literal(4)

    def test_identifier(self):
        assert parse_value("START") == LabelRef("START")
        assert parse_value("_tmp1") == LabelRef("_tmp1")

    def test_invalid(self):
        assert parse_value("1X") is None
        assert parse_value("0x10") is None
        assert parse_value("") is None


# =============================================================================
# Line Kinds
# =============================================================================

class TestLineKinds:
    """Test classification of individual lines."""

    def test_blank_and_comment_lines(self):
        records, _ = analyze("\n   \n; just a comment\n")
        assert [r.kind for r in records] == [LineKind.BLANK] * 3
        assert not any(r.occupies_word for r in records)

    def test_label_only_line(self):
        records, symbols = analyze("LOC 5\nHERE:\n        HLT")
        assert records[1].kind is LineKind.LABEL_ONLY
        assert records[1].label == "HERE"
        assert not records[1].occupies_word
        assert symbols.resolve("HERE") == 5
        assert records[2].address == 5

    def test_instruction_line(self):
        records, symbols = analyze("START:  ldr 0,0,100   ; load")
        record = records[0]
        assert record.kind is LineKind.INSTRUCTION
        assert record.label == "START"
        assert record.operation == "LDR"
        assert record.operand_text == "0,0,100"
        assert record.comment == "load"
        assert record.occupies_word
        assert record.address == 0
        assert symbols.resolve("START") == 0

    def test_raw_text_kept_verbatim(self):
        line = "START:  LDR 0,0,100        ; R0 <- M[100]"
        records, _ = analyze(line)
        assert records[0].raw == line

    def test_line_terminators_are_stripped(self):
        symbols = SymbolTable()
        records = LineAnalyzer(symbols).analyze(["HLT\r\n", "HLT\n"])
        assert records[0].raw == "HLT"
        assert records[1].raw == "HLT"

    def test_line_numbers_are_one_based(self):
        records, _ = analyze("HLT\nHLT")
        assert [r.line_no for r in records] == [1, 2]
        assert records[1].location.filename == "test.asm"


# =============================================================================
# Directives
# =============================================================================

class TestLocDirective:
    """Test LOC handling."""

    def test_loc_sets_counter(self):
        records, _ = analyze("LOC 10\nHLT\nHLT")
        assert records[0].kind is LineKind.LOC
        assert not records[0].occupies_word
        assert records[1].address == 10
        assert records[2].address == 11

    def test_loc_is_case_insensitive(self):
        records, _ = analyze("loc 3\nHLT")
        assert records[0].kind is LineKind.LOC
        assert records[1].address == 3

    def test_loc_resets_addresses(self):
        records, _ = analyze("LOC 10\nHLT\nLOC 100\nHLT\nLOC 4\nHLT")
        words = [r.address for r in records if r.occupies_word]
        assert words == [10, 100, 4]

    def test_label_on_loc_binds_new_counter(self):
        """A label on a LOC line names the address LOC sets, not the one before it."""
        records, symbols = analyze("HLT\nHERE: LOC 50\nHLT")
        assert records[1].label == "HERE"
        assert symbols.resolve("HERE") == 50

    def test_loc_largest_address(self):
        records, _ = analyze("LOC 65535\nHLT")
        assert records[1].address == 65535

    def test_loc_above_16_bits(self):
        with pytest.raises(DirectiveError) as exc_info:
            analyze("LOC 65536\nHLT")
        assert "does not fit in 16 bits" in str(exc_info.value)
        assert exc_info.value.line == 1

    def test_counter_past_16_bits_warns(self):
        diagnostics = DiagnosticLog()
        analyzer = LineAnalyzer(SymbolTable(diagnostics), "test.asm", diagnostics)
        records = analyzer.analyze(["LOC 65535", "HLT", "Data 1"])
        assert records[2].address == 65536
        assert diagnostics.warning_count() == 1
        warning = diagnostics.warnings[0]
        assert warning.line == 3
        assert "location counter 65536 does not fit in 16 bits" in warning.message
        assert "placed at 0" in warning.message

    def test_loc_without_argument(self):
        with pytest.raises(DirectiveError) as exc_info:
            analyze("HLT\nLOC")
        assert exc_info.value.line == 2

    @pytest.mark.parametrize("argument", ["-1", "abc", "10,2", "1.5"])
    def test_loc_invalid_argument(self, argument):
        with pytest.raises(DirectiveError):
            analyze(f"LOC {argument}")


class TestDataDirective:
    """Test Data handling."""

    def test_data_literal(self):
        records, symbols = analyze("LOC 100\nD1: Data 7")
        record = records[1]
        assert record.kind is LineKind.DATA
        assert record.operation == "Data"
        assert record.data_value == Literal(7)
        assert record.occupies_word
        assert record.address == 100
        assert symbols.resolve("D1") == 100

    def test_data_label(self):
        records, _ = analyze("PTR: Data TABLE\nTABLE: Data 1")
        assert records[0].data_value == LabelRef("TABLE")

    def test_data_negative(self):
        records, _ = analyze("Data -1")
        assert records[0].data_value == Literal(-1)

    def test_data_without_argument(self):
        with pytest.raises(DirectiveError):
            analyze("Data")

    def test_data_invalid_argument(self):
        with pytest.raises(DirectiveError) as exc_info:
            analyze("Data 1,2")
        assert "invalid Data value '1,2'" in str(exc_info.value)


# =============================================================================
# Location Counter
# =============================================================================

class TestLocationCounter:
    """Test explicit threading of the location counter."""

    def test_analyze_line_returns_next_counter(self):
        analyzer = LineAnalyzer(SymbolTable())
        record, next_counter = analyzer.analyze_line("HLT", 1, 7)
        assert record.address == 7
        assert next_counter == 8

    def test_non_word_lines_keep_counter(self):
        analyzer = LineAnalyzer(SymbolTable())
        for line in ["", "; comment", "HERE:"]:
            _, next_counter = analyzer.analyze_line(line, 1, 7)
            assert next_counter == 7

    def test_blank_and_label_lines_use_no_address(self):
        source = "LOC 10\nA: HLT\n\n; note\nB:\nC: HLT"
        records, symbols = analyze(source)
        assert symbols.as_dict() == {"A": 10, "B": 11, "C": 11}
        assert [r.address for r in records if r.occupies_word] == [10, 11]

    def test_program_a_addresses(self):
        source = "LOC 10\nSTART:  LDR 0,0,100\nLOC 100\nD1: Data 7"
        _, symbols = analyze(source)
        assert symbols.resolve("START") == 10
        assert symbols.resolve("D1") == 100
