import unittest

from rescodec.core import Record
from rescodec.fields import StructField, TagField, BytesField, ArrayField
from rescodec.meta import Compliant
from rescodec.streams import Cursor
from rescodec.exceptions import (
    TruncatedInputError,
    MagicException,
    OversizeFieldError,
)


def test_record():
    """Check that building a Record from fields behaves correctly."""
    class Dummy(Record):
        a = StructField('I', default=0xbad)
        b = TagField(0x10)
        c = StructField('I', default=0xdeadbeef)

    dummy = Dummy()

    assert dummy.a.size == 4
    assert dummy.a.raw == b'\xad\x0b\x00\x00'
    assert dummy.a.value == 0xbad
    assert dummy.a.offset == 0x00
    assert dummy.a.father is dummy

    assert dummy.b.size == 0x10
    assert dummy.b.raw == b'\x00' * 0x10
    assert dummy.b.offset == 0x04

    assert dummy.c.size == 0x4
    assert dummy.c.raw == b'\xef\xbe\xad\xde'
    assert dummy.c.offset == 0x14

    assert dummy.size == 0x18
    assert len(dummy.raw) == dummy.size
    assert dummy.raw == (
        b'\xad\x0b\x00\x00' +
        b'\x00' * 0x10 +
        b'\xef\xbe\xad\xde'
    )


def test_fields_are_not_shared():
    class Dummy(Record):
        a = StructField('I')

    first = Dummy()
    second = Dummy()

    first.a.value = 1

    assert second.a.value == 0
    assert first.a is not second.a


def test_nested_records_layout():
    """Check that a record used as a field of another one is laid out
    inline, like a struct inside a struct."""

    class Span(Record):
        off = StructField('I')
        sz = StructField('I')

    class Experiment(Record):
        span_a = Span()
        span_b = Span()

        contents = BytesField(0x100)

    experiment = Experiment()

    assert experiment.layout == {
        'span_a': (0, 8),
        'span_b': (8, 8),
        'contents': (16, 256),
    }

    assert experiment.size == 0x100 + 2 * (4 + 4)
    assert len(experiment.raw) == experiment.size
    assert experiment.raw == b'\x00' * experiment.size

    experiment.span_b.sz.value = 0x20
    assert experiment.raw[12:16] == b'\x20\x00\x00\x00'


def test_record_inheritance():
    class Base(Record):
        a = StructField('B')

    class Derived(Base):
        b = StructField('B', default=2)

    derived = Derived()

    assert derived.get_ordered_fields_name() == ['a', 'b']
    assert derived.raw == b'\x00\x02'


def test_record_array_with_sibling_count():
    class Point(Record):
        x = StructField('h')
        y = StructField('h')

    class Polygon(Record):
        count = StructField('I')
        points = ArrayField(Point(), n='count')

    polygon = Polygon(b'\x02\x00\x00\x00' + b'\x01\x00\x02\x00' + b'\x03\x00\x04\x00')

    assert polygon.count.value == 2
    assert [(_.x.value, _.y.value) for _ in polygon.points] == [(1, 2), (3, 4)]

    point = Point()
    point.x.value = -1
    polygon.points.append(point)

    # the count follows the array when packing
    assert polygon.raw[:4] == b'\x03\x00\x00\x00'
    assert polygon.raw[-4:] == b'\xff\xff\x00\x00'


def test_record_read_write():
    class Dummy(Record):
        a = StructField('H')
        b = StructField('H')

    cursor = Cursor(b'\xff\xff' + b'\x01\x00\x02\x00' + b'\xff')
    cursor.seek(2)

    dummy = Dummy.read(cursor)

    assert cursor.tell() == 6
    assert dummy.offset == 2
    assert (dummy.a.value, dummy.b.value) == (1, 2)

    out = Cursor()
    out.write(b'\xee')
    dummy.write(out)

    assert out.tell() == 5
    assert out.getvalue() == b'\xee\x01\x00\x02\x00'


class RecordErrorsTests(unittest.TestCase):

    def test_truncated(self):
        class Dummy(Record):
            a = StructField('I')
            b = StructField('I')

        for length in range(8):
            with self.assertRaises(TruncatedInputError) as context:
                Dummy.read(Cursor(b'\x00' * length))

            self.assertEqual(context.exception.chain, ['Dummy'])

    def test_chain(self):
        class Inner(Record):
            magic = TagField(4, default='MAGC', is_magic=True)

        class Outer(Record):
            padding = StructField('I')
            inner = Inner()

        with self.assertRaises(MagicException) as context:
            Outer.read(Cursor(b'\x00' * 4 + b'NOPE'), compliant=Compliant.MAGIC)

        self.assertEqual(context.exception.chain, ['magic', 'inner'])
        self.assertIn('inner.magic', str(context.exception))

    def test_magic_not_enforced(self):
        class Inner(Record):
            magic = TagField(4, default='MAGC', is_magic=True)

        inner = Inner.read(Cursor(b'NOPE'), compliant=Compliant.NONE)

        self.assertEqual(inner.magic.value, 'NOPE')

    def test_oversize(self):
        class Dummy(Record):
            count = StructField('H')
            tag = TagField(4)

        dummy = Dummy()

        with self.assertRaises(OversizeFieldError):
            dummy.count.value = 0x10000

        with self.assertRaises(OversizeFieldError):
            dummy.tag = 'SPR40'

        self.assertEqual(dummy.raw, b'\x00' * 6)

    def test_equality(self):
        class Dummy(Record):
            a = StructField('I')

        self.assertEqual(Dummy(b'\x01\x00\x00\x00'), Dummy(b'\x01\x00\x00\x00'))
        self.assertNotEqual(Dummy(b'\x01\x00\x00\x00'), Dummy(b'\x02\x00\x00\x00'))
