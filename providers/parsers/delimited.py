# providers/parsers/delimited.py
"""
Delimited text (CSV-ish) feeds.

Suppliers mix `,` and `;`, quote inconsistently and occasionally ship broken
lines. Each line is parsed on its own so a bad line only costs that row.
"""
from __future__ import annotations

import csv
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class DelimitedTable:
    headers: List[str]
    rows: List[Dict[str, str]] = field(default_factory=list)
    delimiter: str = ","


def detect_delimiter(header_line: str) -> str:
    """`;` wins whenever the header has one, otherwise `,`."""
    return ";" if ";" in header_line else ","


def split_line(line: str, delimiter: str = ",") -> Optional[List[str]]:
    """
    Split one line honouring double quotes (`""` escapes a quote inside a quoted
    field). Fields come back trimmed. Returns None when the line cannot be parsed.
    """
    try:
        fields = next(
            csv.reader([line], delimiter=delimiter, quotechar='"', skipinitialspace=True,
                       strict=True)
        )
    except (csv.Error, StopIteration):
        return None
    return [f.strip() for f in fields]


def parse_table(text: str, delimiter: Optional[str] = None) -> DelimitedTable:
    """
    Parse a header + rows feed into dicts keyed by header name.

    Blank lines, unparseable lines and rows with fewer than two fields are
    dropped; short rows are padded with "".
    """
    lines = [ln for ln in text.splitlines() if ln.strip()]
    if not lines:
        return DelimitedTable(headers=[], delimiter=delimiter or ",")

    delim = delimiter or detect_delimiter(lines[0])
    headers = [h.strip('"').strip() for h in (split_line(lines[0], delim) or [])]
    table = DelimitedTable(headers=headers, delimiter=delim)

    for line in lines[1:]:
        values = split_line(line, delim)
        if not values or len(values) < 2:
            continue
        row = {h: (values[i] if i < len(values) else "") for i, h in enumerate(headers) if h}
        table.rows.append(row)
    return table
