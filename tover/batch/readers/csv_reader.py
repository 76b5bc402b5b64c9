"""
CSV reader for uploaded import files.

Turns raw upload bytes into RawRow objects keyed by normalized header
names. Parsing is strict: anything the csv module cannot tokenize is a
CSVParseError, never a row error.
"""

import csv
import io

from tover.core.errors import CSVParseError
from tover.core.models import RawRow

# Row 1 is the header line
FIRST_DATA_ROW = 2


def normalize_header(name: str) -> str:
    return name.strip().lower()


def decode_content(content: bytes | str, encoding: str = "utf-8-sig") -> str:
    """
    Decode upload bytes to text, dropping a leading byte order mark.

    Raises:
        CSVParseError: If the bytes are not valid in the given encoding
    """
    if isinstance(content, str):
        return content.lstrip("\ufeff")
    try:
        return content.decode(encoding)
    except UnicodeDecodeError as e:
        raise CSVParseError(f"File is not valid {encoding}: {e.reason}") from e


class CSVReader:
    """
    Reads delimited text with a header line into RawRows.

    Empty lines are skipped without consuming a row number, so reported
    row numbers match the data rows of the uploaded file.
    """

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8-sig"):
        """
        Initialize CSV reader.

        Args:
            delimiter: Field delimiter
            encoding: Encoding used for byte input
        """
        self.delimiter = delimiter
        self.encoding = encoding

    def read(self, content: bytes | str) -> tuple[list[RawRow], list[str]]:
        """
        Parse an upload.

        Args:
            content: Raw file bytes or already-decoded text

        Returns:
            Tuple of (rows, headers). headers is empty for an empty file.

        Raises:
            CSVParseError: If the content cannot be decoded or tokenized
        """
        text = decode_content(content, self.encoding)
        reader = csv.reader(io.StringIO(text, newline=""), delimiter=self.delimiter, strict=True)

        headers: list[str] = []
        rows: list[RawRow] = []

        try:
            for cells in reader:
                # only completely empty lines; ",,," and "   " are data rows
                if cells == [] or cells == [""]:
                    continue
                if not headers:
                    headers = [normalize_header(cell) for cell in cells]
                    continue

                padded = cells[: len(headers)] + [""] * (len(headers) - len(cells))
                rows.append(
                    RawRow(
                        row_number=len(rows) + FIRST_DATA_ROW,
                        data=dict(zip(headers, padded)),
                    )
                )
        except csv.Error as e:
            raise CSVParseError(f"Malformed CSV: {e}", line_number=reader.line_num) from e

        return rows, headers


def read_csv(content: bytes | str, delimiter: str = ",") -> tuple[list[RawRow], list[str]]:
    """Parse upload content with a default CSVReader."""
    return CSVReader(delimiter=delimiter).read(content)
