"""
Unit tests for the CSV reader.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tover.batch.readers import CSVReader, read_csv
from tover.core.errors import CSVParseError


@pytest.mark.unit
class TestCSVReader:
    """Tests for CSVReader"""

    def test_headers_are_trimmed_and_lowercased(self):
        """Test header names are normalized"""
        rows, headers = read_csv(b" Source ,EXTERNAL_ORDER_ID,Ordered_At\nallegro,A-1,2025-03-01\n")

        assert headers == ["source", "external_order_id", "ordered_at"]
        assert rows[0].data == {
            "source": "allegro",
            "external_order_id": "A-1",
            "ordered_at": "2025-03-01",
        }

    def test_row_numbers_start_at_two(self):
        """Test the first data row is row 2"""
        rows, _ = read_csv("sku,on_hand_qty\na,1\nb,2\nc,3\n")

        assert [r.row_number for r in rows] == [2, 3, 4]

    def test_empty_lines_are_skipped(self):
        """Test empty lines do not become rows or consume numbers"""
        rows, _ = read_csv("sku,qty\n\na,1\n\n\nb,2\n")

        assert [r.data["sku"] for r in rows] == ["a", "b"]
        assert [r.row_number for r in rows] == [2, 3]

    def test_blank_cell_rows_are_kept(self):
        """Test delimiter-only and whitespace-only lines stay rows so they get validated"""
        rows, _ = read_csv("source,external_order_id,ordered_at,currency\n,,,\n   \ns,x,2025-01-01,eur\n")

        assert [r.row_number for r in rows] == [2, 3, 4]
        assert rows[0].data == {"source": "", "external_order_id": "", "ordered_at": "", "currency": ""}
        assert rows[1].data["source"] == "   "
        assert rows[2].data["external_order_id"] == "x"

    def test_header_only_file_has_no_rows(self):
        """Test a header with no data rows"""
        rows, headers = read_csv(b"sku,on_hand_qty\n")

        assert rows == []
        assert headers == ["sku", "on_hand_qty"]

    def test_empty_content(self):
        """Test completely empty input"""
        assert read_csv(b"") == ([], [])

    def test_short_rows_are_padded_and_long_rows_truncated(self):
        """Test missing trailing cells become empty strings"""
        rows, _ = read_csv("a,b,c\n1\n1,2,3,4\n")

        assert rows[0].data == {"a": "1", "b": "", "c": ""}
        assert rows[1].data == {"a": "1", "b": "2", "c": "3"}

    def test_quoted_fields(self):
        """Test quoted cells with delimiters and newlines"""
        rows, _ = read_csv('sku,name\n"A,1","two\nlines"\n')

        assert rows[0].data == {"sku": "A,1", "name": "two\nlines"}

    def test_utf8_bom_is_dropped(self):
        """Test a leading byte order mark does not pollute the first header"""
        rows, headers = read_csv("\ufeffsku,qty\nżółw,1\n".encode("utf-8"))

        assert headers == ["sku", "qty"]
        assert rows[0].data["sku"] == "żółw"

    def test_crlf_line_endings(self):
        """Test Windows line endings"""
        rows, _ = read_csv(b"sku,qty\r\na,1\r\nb,2\r\n")

        assert [r.data["qty"] for r in rows] == ["1", "2"]

    def test_invalid_utf8_raises_parse_error(self):
        """Test undecodable bytes are a parse error, not a row error"""
        with pytest.raises(CSVParseError):
            read_csv(b"sku,qty\n\xff\xfe,1\n")

    def test_stray_quote_raises_parse_error(self):
        """Test strict mode rejects malformed quoting"""
        with pytest.raises(CSVParseError) as exc_info:
            read_csv('sku,qty\n"a"b,1\n')

        assert exc_info.value.line_number == 2

    def test_semicolon_delimiter(self):
        """Test a custom delimiter"""
        rows, headers = CSVReader(delimiter=";").read("sku;qty\na;1\n")

        assert headers == ["sku", "qty"]
        assert rows[0].data == {"sku": "a", "qty": "1"}

    @given(
        st.lists(
            st.lists(st.text(alphabet="abcxyz019 .-", min_size=1, max_size=8), min_size=2, max_size=2),
            max_size=20,
        )
    )
    def test_property_every_nonempty_line_becomes_one_row(self, cells):
        """Property test: one RawRow per non-empty data line, numbered consecutively"""
        lines = ["left,right"] + [f"{a},{b}" for a, b in cells]
        rows, _ = read_csv("\n".join(lines) + "\n")

        assert len(rows) == len(cells)
        assert [r.row_number for r in rows] == list(range(2, 2 + len(cells)))
