"""
CSV reading and writing for imports and exports.

Services work on parsed rows (lists of dicts); this module only turns
uploaded text into rows and rows into text.
"""
import csv
import io
from typing import Dict, Iterable, List, Sequence

from cogs.exceptions import ValidationError


def decode_upload(uploaded_file) -> str:
    """Read an uploaded file as text. A UTF-8 byte-order mark is dropped."""
    raw = uploaded_file.read()
    if isinstance(raw, bytes):
        try:
            return raw.decode('utf-8-sig')
        except UnicodeDecodeError:
            raise ValidationError("CSV file must be UTF-8 encoded", field='file')
    return raw.lstrip('﻿')


def parse_csv(text: str) -> List[List[str]]:
    """All non-blank rows, quoted fields and embedded commas handled by the csv module."""
    reader = csv.reader(io.StringIO(text))
    return [row for row in reader if any(cell.strip() for cell in row)]


def rows_as_dicts(
    rows: Sequence[Sequence[str]],
    required_headers: Iterable[str],
    lowercase: bool = False,
) -> List[Dict[str, str]]:
    """
    Key each data row by the header row.

    Args:
        rows: Parsed rows, header first.
        required_headers: Headers that must be present.
        lowercase: Compare and key headers case-insensitively.

    Raises:
        ValidationError: the file is empty or headers are missing.
    """
    if not rows:
        raise ValidationError("CSV is empty", field='file')

    headers = [h.strip() for h in rows[0]]
    if lowercase:
        headers = [h.lower() for h in headers]
        required = [h.lower() for h in required_headers]
    else:
        required = list(required_headers)

    missing = [h for h in required if h not in headers]
    if missing:
        raise ValidationError(f"Missing headers: {', '.join(missing)}", field='file')

    result = []
    for row in rows[1:]:
        padded = list(row) + [""] * (len(headers) - len(row))
        result.append(dict(zip(headers, padded)))
    return result


def render_csv(headers: Sequence[str], rows: Iterable[Sequence]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if cell is None else cell for cell in row])
    return buffer.getvalue()
