from __future__ import annotations

import hashlib
import hmac
from datetime import datetime, timezone

from django.test import SimpleTestCase

from providers.parsers import (
    build_signed_headers,
    compute_signature,
    detect_delimiter,
    parse_row,
    parse_rows,
    parse_table,
    rfc1123,
    split_line,
    split_quoted,
    split_segments,
)


class DelimitedParserTests(SimpleTestCase):
    def test_semicolon_header_wins(self):
        self.assertEqual(detect_delimiter("a;b,c"), ";")
        self.assertEqual(detect_delimiter("a,b,c"), ",")

    def test_quoted_field_keeps_delimiter(self):
        self.assertEqual(split_line('"A, B";C', ";"), ["A, B", "C"])
        self.assertEqual(split_line('"A, B",C', ","), ["A, B", "C"])

    def test_escaped_quote_inside_field(self):
        self.assertEqual(split_line('"Monitor 27"" IPS",5', ","), ['Monitor 27" IPS', "5"])

    def test_fields_are_trimmed(self):
        self.assertEqual(split_line(" a ,  b ,c ", ","), ["a", "b", "c"])

    def test_table_drops_blank_and_short_rows_and_pads(self):
        text = "p_id;p_name;price\n\n1;Mouse;10,5\nbroken\n2;Keyboard\n"
        table = parse_table(text)
        self.assertEqual(table.delimiter, ";")
        self.assertEqual(table.headers, ["p_id", "p_name", "price"])
        self.assertEqual(
            table.rows,
            [
                {"p_id": "1", "p_name": "Mouse", "price": "10,5"},
                {"p_id": "2", "p_name": "Keyboard", "price": ""},
            ],
        )

    def test_unparseable_line_costs_only_that_row(self):
        text = 'id,name\n1,"ok"\n2,"bad"x"\n3,fine\n'
        table = parse_table(text)
        self.assertEqual([r["id"] for r in table.rows], ["1", "3"])

    def test_empty_text(self):
        table = parse_table("   \n")
        self.assertEqual(table.headers, [])
        self.assertEqual(table.rows, [])


class SegmentedParserTests(SimpleTestCase):
    def test_tab_segments(self):
        self.assertEqual(split_segments("a;b\tc;d\te\n"), ["a;b", "c;d", "e"])

    def test_space_runs_when_no_tab(self):
        self.assertEqual(split_segments("a;b    c;d  x"), ["a;b", "c;d  x"])

    def test_quoted_fields_are_unwrapped(self):
        self.assertEqual(split_quoted('"1"; "ABC" ;"x;y"'), ["1", "ABC", "x;y"])
        self.assertEqual(split_quoted(""), [])

    def test_header_and_noise_lines_are_skipped(self):
        self.assertIsNone(parse_row("ProductID;Code;Name\tcat"))
        self.assertIsNone(parse_row("0;X;Y"))
        self.assertIsNone(parse_row("   "))
        self.assertEqual(parse_row("12;X\tcat2"), [["12", "X"], ["cat2"]])

    def test_parse_rows(self):
        text = "ProductID;Code\n1;A\tB\n\n2;C\n"
        self.assertEqual(parse_rows(text), [[["1", "A"], ["B"]], [["2", "C"]]])

    def test_non_ascii_digits_are_noise(self):
        self.assertIsNone(parse_row("\u00b2;B;;X"))
        self.assertIsNone(parse_row("\u0661\u0662;B"))
        text = "1;A;;Asus\n\u00b2;B;;X\n3;C;;Y\n"
        self.assertEqual([row[0][0] for row in parse_rows(text)], ["1", "3"])


class SigningTests(SimpleTestCase):
    TS = "Tue, 02 Jan 2024 03:04:05 GMT"

    def test_rfc1123_is_gmt(self):
        moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        self.assertEqual(rfc1123(moment), "Tue, 02 Jan 2024 03:04:05 GMT")
        self.assertEqual(rfc1123(moment.replace(tzinfo=None)), "Tue, 02 Jan 2024 03:04:05 GMT")

    def test_signature_is_deterministic_and_ignores_leading_question_mark(self):
        ts = "Tue, 02 Jan 2024 03:04:05 GMT"
        a = compute_signature("get", "?a=1", "user", "secret", ts)
        b = compute_signature("GET", "a=1", "user", "secret", ts)
        self.assertEqual(a, b)
        self.assertEqual(len(a), 40)
        self.assertNotEqual(a, compute_signature("GET", "a=2", "user", "secret", ts))

    def test_signature_is_hmac_sha1_over_method_query_identity_timestamp(self):
        expected = hmac.new(
            b"secret", b"GETa=1userTue, 02 Jan 2024 03:04:05 GMT", hashlib.sha1
        ).hexdigest()
        self.assertEqual(compute_signature("GET", "?a=1", "user", "secret", self.TS), expected)
        headers = build_signed_headers("GET", "a=1", "user", "secret", timestamp=self.TS)
        self.assertEqual(headers["X-NodWS-Auth"], expected)

    def test_signed_headers(self):
        ts = "Tue, 02 Jan 2024 03:04:05 GMT"
        headers = build_signed_headers("GET", "a=1", "user", "secret", timestamp=ts)
        self.assertEqual(headers["Date"], ts)
        self.assertEqual(headers["X-NodWS-User"], "user")
        self.assertEqual(
            headers["X-NodWS-Auth"], compute_signature("GET", "a=1", "user", "secret", ts)
        )
