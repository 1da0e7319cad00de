import struct
import unittest

import numpy as np

from sekonic_c7000.errors import DecodeError, FramingError
from sekonic_c7000.fields import FieldCursor, open_envelope


class NextDelimitedTests(unittest.TestCase):
    def test_splits_on_commas(self):
        cursor = FieldCursor(b'ab,,cd')
        self.assertEqual(cursor.next_delimited(), b'ab')
        self.assertEqual(cursor.next_delimited(), b'')
        self.assertEqual(cursor.next_delimited(), b'cd')
        self.assertTrue(cursor.exhausted)

    def test_exhausted_cursor_returns_empty(self):
        cursor = FieldCursor(b'x')
        cursor.next_delimited()
        self.assertEqual(cursor.next_delimited(), b'')
        self.assertEqual(cursor.next_delimited(), b'')

    def test_offset_tracks_position(self):
        cursor = FieldCursor(b'12,345')
        cursor.next_delimited()
        self.assertEqual(cursor.offset, 3)
        self.assertEqual(cursor.remaining_length, 3)


class NextFixedTests(unittest.TestCase):
    def test_returns_blob_containing_commas(self):
        cursor = FieldCursor(b',\x01,\x02,next')
        self.assertEqual(cursor.next_fixed(4), b',\x01,\x02')
        self.assertEqual(cursor.next_delimited(), b'next')

    def test_blob_at_end_of_buffer(self):
        cursor = FieldCursor(b'abcd')
        self.assertEqual(cursor.next_fixed(4), b'abcd')
        self.assertTrue(cursor.exhausted)

    def test_fails_when_too_short(self):
        cursor = FieldCursor(b'abc', tag=b'MRB')
        with self.assertRaises(DecodeError) as ctx:
            cursor.next_fixed(4)
        self.assertEqual(ctx.exception.tag, b'MRB')
        self.assertEqual(ctx.exception.offset, 0)

    def test_fails_when_not_followed_by_comma(self):
        cursor = FieldCursor(b'x,abcdE')
        cursor.next_delimited()
        with self.assertRaises(DecodeError) as ctx:
            cursor.next_fixed(4)
        self.assertEqual(ctx.exception.offset, 2)
        self.assertIn('0x45', str(ctx.exception))

    def test_width_table(self):
        data = b'\x00\x01\x02\x03,'
        for n, ok in [(0, False), (1, False), (3, False), (4, True), (5, True), (6, False)]:
            with self.subTest(n=n):
                cursor = FieldCursor(data)
                if ok:
                    self.assertEqual(cursor.next_fixed(n), data[:n])
                else:
                    with self.assertRaises(DecodeError):
                        cursor.next_fixed(n)

    def test_failed_read_does_not_advance(self):
        cursor = FieldCursor(b'abcdE')
        with self.assertRaises(DecodeError):
            cursor.next_fixed(4)
        self.assertEqual(cursor.offset, 0)


class TypedFieldTests(unittest.TestCase):
    def test_unsigned(self):
        cursor = FieldCursor(b'007,4294967295')
        self.assertEqual(cursor.next_unsigned(), 7)
        self.assertEqual(cursor.next_unsigned(), 0xFFFFFFFF)

    def test_unsigned_allows_zero_padding(self):
        self.assertEqual(FieldCursor(b'000000000000042').next_unsigned(), 42)

    def test_unsigned_rejects_bad_content(self):
        for raw in [b'', b'-1', b'12a', b' 1', b'4294967296', b'1.5', b'9' * 5000]:
            with self.subTest(raw=raw):
                with self.assertRaises(DecodeError):
                    FieldCursor(raw + b',').next_unsigned()

    def test_string_truncates_at_null(self):
        self.assertEqual(FieldCursor(b'ABC\x00garbage').next_string(), 'ABC')

    def test_string_rejects_non_ascii(self):
        with self.assertRaises(DecodeError):
            FieldCursor(b'caf\xe9').next_string()

    def test_string_ignores_bytes_after_padding(self):
        self.assertEqual(FieldCursor(b'Home\x00\xff\xfe,1').next_string(), 'Home')

    def test_floats(self):
        cursor = FieldCursor(struct.pack('>f', 5600.5) + b',' + struct.pack('>d', -0.125))
        self.assertEqual(cursor.next_f32_be(), 5600.5)
        self.assertEqual(cursor.next_f64_be(), -0.125)
        self.assertTrue(cursor.exhausted)

    def test_f32_array(self):
        raw = struct.pack('>2f', 1.0, -2.5)
        cursor = FieldCursor(raw + b',tail')
        values = cursor.next_f32_array_be(2)
        np.testing.assert_array_equal(values, [1.0, -2.5])
        self.assertEqual(cursor.offset, 9)
        self.assertEqual(cursor.next_delimited(), b'tail')

    def test_f32_array_is_read_only(self):
        values = FieldCursor(struct.pack('>2f', 1.0, 2.0)).next_f32_array_be(2)
        with self.assertRaises(ValueError):
            values[0] = 3.0

    def test_collect_remaining_skips_empty_fields(self):
        cursor = FieldCursor(b'a,,b\x00,c,')
        self.assertEqual(cursor.collect_remaining(), [b'a', b'b\x00', b'c'])
        self.assertEqual(cursor.collect_remaining(), [])


class EnvelopeTests(unittest.TestCase):
    def test_opens_after_marker(self):
        cursor = open_envelope(b'MIB@@007,0002', b'MIB')
        self.assertEqual(cursor.offset, 5)
        self.assertEqual(cursor.tag, b'MIB')
        self.assertEqual(cursor.next_unsigned(), 7)

    def test_tag_mismatch(self):
        with self.assertRaises(FramingError):
            open_envelope(b'GTB@@Home,1', b'MIB')

    def test_missing_marker(self):
        with self.assertRaises(FramingError):
            open_envelope(b'MIB007', b'MIB')

    def test_short_payload(self):
        with self.assertRaises(FramingError):
            open_envelope(b'MI', b'MIB')

    def test_offsets_are_payload_relative(self):
        cursor = open_envelope(b'MRB@@abc', b'MRB')
        with self.assertRaises(DecodeError) as ctx:
            cursor.next_fixed(4)
        self.assertEqual(ctx.exception.offset, 5)
        self.assertIn('MRB', str(ctx.exception))


if __name__ == '__main__':
    unittest.main()
