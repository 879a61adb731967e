"""Tests for record reassembly across chunk boundaries."""

from __future__ import annotations

import unittest

from csvtail.reassembler import split_records, strip_terminator


SAMPLE = (
    b"id,name,note\n"
    b'1,Ann,"likes ""tea"""\n'
    b'2,Bob,"line one\nline two"\n'
    b"\n"
    b'5,Ed,12" monitor\n'
    b"3,Cy,plain\r\n"
    b"4,Di,unfinish"
)


class TestSplitRecords(unittest.TestCase):

    def test_complete_lines(self):
        records, fragment = split_records(b"", b"a,b\n1,2\n")
        self.assertEqual(records, [b"a,b\n", b"1,2\n"])
        self.assertEqual(fragment, b"")

    def test_trailing_partial_is_held(self):
        records, fragment = split_records(b"", b"1,Ann\n2,Bo")
        self.assertEqual(records, [b"1,Ann\n"])
        self.assertEqual(fragment, b"2,Bo")

    def test_unterminated_input_is_never_a_record(self):
        """A read that ends exactly at the end of a line without its newline stays pending."""
        records, fragment = split_records(b"", b"3,Cy")
        self.assertEqual(records, [])
        self.assertEqual(fragment, b"3,Cy")

    def test_fragment_completed_by_next_chunk(self):
        records, fragment = split_records(b"2,Bo", b"b\n3,Cy\n")
        self.assertEqual(records, [b"2,Bob\n", b"3,Cy\n"])
        self.assertEqual(fragment, b"")

    def test_empty_input(self):
        self.assertEqual(split_records(b"", b""), ([], b""))
        self.assertEqual(split_records(b"x", b""), ([], b"x"))

    def test_newline_inside_quotes_does_not_split(self):
        records, fragment = split_records(b"", b'1,"multi\nline",x\n2,y,z\n')
        self.assertEqual(records, [b'1,"multi\nline",x\n', b"2,y,z\n"])
        self.assertEqual(fragment, b"")

    def test_open_quote_at_chunk_end_is_held(self):
        records, fragment = split_records(b"", b'1,"still\nopen')
        self.assertEqual(records, [])
        self.assertEqual(fragment, b'1,"still\nopen')

        records, fragment = split_records(fragment, b' here",x\n')
        self.assertEqual(records, [b'1,"still\nopen here",x\n'])
        self.assertEqual(fragment, b"")

    def test_escaped_quotes_stay_inside_field(self):
        records, _ = split_records(b"", b'1,"say ""hi""\nthere"\n2,ok\n')
        self.assertEqual(records, [b'1,"say ""hi""\nthere"\n', b"2,ok\n"])

    def test_quote_inside_unquoted_field_is_literal(self):
        data = b'1,12" monitor\n2,Bob\n3,Cy\n'
        records, fragment = split_records(b"", data)
        self.assertEqual(records, [b'1,12" monitor\n', b"2,Bob\n", b"3,Cy\n"])
        self.assertEqual(fragment, b"")

        records, fragment = split_records(fragment, b'4,5" cable\n5,Ed\n')
        self.assertEqual(records, [b'4,5" cable\n', b"5,Ed\n"])
        self.assertEqual(fragment, b"")

    def test_quote_opens_only_at_field_start(self):
        records, fragment = split_records(b"", b'a;"x;\ny";b"c\n2;3\n', delimiter=b";")
        self.assertEqual(records, [b'a;"x;\ny";b"c\n', b"2;3\n"])
        self.assertEqual(fragment, b"")

    def test_text_after_closing_quote(self):
        records, _ = split_records(b"", b'1,"Bo"b\n2,Cy\n')
        self.assertEqual(records, [b'1,"Bo"b\n', b"2,Cy\n"])

    def test_multibyte_delimiter_rejected(self):
        with self.assertRaises(ValueError):
            split_records(b"", b"a::b\n", delimiter=b"::")

    def test_no_loss_at_every_split_point(self):
        """Feeding two parts with the carried fragment equals feeding the whole."""
        whole_records, whole_fragment = split_records(b"", SAMPLE)
        for cut in range(len(SAMPLE) + 1):
            first, fragment = split_records(b"", SAMPLE[:cut])
            second, fragment = split_records(fragment, SAMPLE[cut:])
            self.assertEqual(first + second, whole_records, f"cut at {cut}")
            self.assertEqual(fragment, whole_fragment, f"cut at {cut}")

    def test_record_bytes_account_for_everything(self):
        records, fragment = split_records(b"", SAMPLE)
        self.assertEqual(b"".join(records) + fragment, SAMPLE)


class TestStripTerminator(unittest.TestCase):

    def test_lf(self):
        self.assertEqual(strip_terminator(b"a,b\n"), b"a,b")

    def test_crlf(self):
        self.assertEqual(strip_terminator(b"a,b\r\n"), b"a,b")

    def test_none(self):
        self.assertEqual(strip_terminator(b"a,b"), b"a,b")


if __name__ == "__main__":
    unittest.main()
