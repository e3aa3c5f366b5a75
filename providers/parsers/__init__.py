from providers.parsers.delimited import DelimitedTable, detect_delimiter, parse_table, split_line
from providers.parsers.segmented import parse_row, parse_rows, split_quoted, split_segments
from providers.parsers.signing import build_signed_headers, compute_signature, rfc1123

__all__ = [
    "DelimitedTable",
    "build_signed_headers",
    "compute_signature",
    "detect_delimiter",
    "parse_row",
    "parse_rows",
    "parse_table",
    "rfc1123",
    "split_line",
    "split_quoted",
    "split_segments",
]
