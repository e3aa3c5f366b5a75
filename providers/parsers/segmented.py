# providers/parsers/segmented.py
"""
Feeds made of tab separated "super-columns", each one semicolon delimited
internally. Some exports replace the tabs with long runs of spaces.
"""
from __future__ import annotations

import csv
import re
from typing import List, Optional

_SPACE_RUN = re.compile(r" {4,}")
_POSITIVE_INT = re.compile(r"[0-9]+")


def split_segments(line: str) -> List[str]:
    """Split on tabs, or on runs of 4+ spaces when the line has no tab."""
    line = line.rstrip("\r\n")
    parts = line.split("\t") if "\t" in line else _SPACE_RUN.split(line)
    return [p.strip() for p in parts]


def split_quoted(segment: str, delimiter: str = ";") -> List[str]:
    """Quote-aware split of one segment; surrounding quotes and spaces are stripped."""
    if not segment:
        return []
    try:
        fields = next(csv.reader([segment], delimiter=delimiter, quotechar='"',
                                 skipinitialspace=True))
    except (csv.Error, StopIteration):
        fields = segment.split(delimiter)
    return [f.strip().strip('"').strip() for f in fields]


def parse_row(line: str) -> Optional[List[List[str]]]:
    """
    Return the line as a list of segments (each a list of fields), or None for
    header/noise lines: the first field has to be a positive integer.
    """
    if not line.strip():
        return None
    segments = [split_quoted(seg) for seg in split_segments(line)]
    if not segments or not segments[0]:
        return None
    first = segments[0][0]
    if not _POSITIVE_INT.fullmatch(first) or int(first) <= 0:
        return None
    return segments


def parse_rows(text: str) -> List[List[List[str]]]:
    rows = []
    for line in text.splitlines():
        row = parse_row(line)
        if row is not None:
            rows.append(row)
    return rows
