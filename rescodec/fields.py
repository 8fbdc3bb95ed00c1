"""
A Field is "fundamental" datatype from the format point of view, something with a
fixed byte layout that is directly packable/unpackable.
"""
import logging
import struct
from enum import Enum

from .meta import FieldBase, Endianess, Compliant
from .exceptions import (
    RescodecException,
    TruncatedInputError,
    MalformedContainerError,
    MagicException,
    OversizeFieldError,
)


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, name=None, father=None, default=None, offset=None,
                 endianess=Endianess.LITTLE_ENDIAN, compliant=Compliant.INHERIT, is_magic=False):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.offset = offset
        self.endianess = endianess
        self.compliant = compliant
        self.is_magic = is_magic

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def is_compliant(self, level):
        '''Returns True if this field or the first non-inheriting ancestor asks for level'''
        instance = self
        while instance is not None:
            if instance.compliant & level:
                return True
            if not instance.compliant & Compliant.INHERIT:
                break

            instance = instance.father

        return False

    def _check_magic(self, value):
        if not self.is_magic or value == self.default:
            return

        self.logger.warning('magic for field \'%s\' is %r instead of %r', self.name, value, self.default)
        if self.is_compliant(Compliant.MAGIC):
            raise MagicException('bad magic %r for field \'%s\'' % (value, self.name))

    def _get_value(self):
        return self._value

    def _set_value(self, value):
        self._value = value

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _get_raw(self) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_raw() not implemented")

    def _set_raw(self, value) -> None:
        raise NotImplementedError(f"method {self.__class__.__name__}._set_raw() not implemented")

    raw = property(
        fget=lambda self: self._get_raw(),
        fset=lambda self, value: self._set_raw(value),
    )

    def relayout(self, offset=0):
        self.offset = offset

        return self.size

    def _update_value(self):
        '''This is used to update the binary value before packing'''
        pass

    def unpack(self, cursor):
        offset = cursor.tell()
        self.raw = cursor.read_exact(self.size)
        self.offset = offset

    def pack(self, cursor):
        raw = self.raw
        self.offset = cursor.tell()
        cursor.write(raw)


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.

    The "enum" argument takes a subclass of enum.Enum so to have directly a representation
    of the integer value of the field itself. Values that don't fit the format are refused
    with OversizeFieldError instead of being truncated.
    """

    def __init__(self, format, default=0, enum=None, **kw):
        self.format = format
        self.enum = enum
        super().__init__(default=default, **kw)

    def __repr__(self):
        if self.enum and isinstance(self.value, Enum):
            return f'<{self.__class__.__name__}({self.value!r})>'

        if isinstance(self.value, float):
            return '<%s(%r)>' % (self.__class__.__name__, self.value)

        return '<%s(%s)>' % (self.__class__.__name__, hex(self.value))

    def value_from_default(self):
        if not self.enum or isinstance(self.default, Enum):
            return super().value_from_default()

        return self.enum(self.default)

    def get_format(self):
        return '%s%s' % ('<' if self.endianess == Endianess.LITTLE_ENDIAN else '>', self.format)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _encode(self, value) -> bytes:
        try:
            return struct.pack(self.get_format(), value.value if isinstance(value, Enum) else value)
        except struct.error as e:
            raise OversizeFieldError('%r doesn\'t fit format \'%s\': %s' % (value, self.format, e))

    def _set_value(self, value):
        self._encode(value)  # fail fast
        super()._set_value(value)

    def _get_raw(self) -> bytes:
        return self._encode(self.value)

    def _unpack_enum(self, value):
        try:
            return self.enum(value)
        except ValueError:
            if self.is_compliant(Compliant.ENUM):
                raise MalformedContainerError('0x%x is not a valid %s' % (value, self.enum.__name__))

            self.logger.warning('enum %r doesn\'t have element with value 0x%x in it', self.enum, value)

        return value

    def _set_raw(self, raw: bytes) -> None:
        try:
            value = struct.unpack(self.get_format(), raw)[0]
        except struct.error as e:
            raise TruncatedInputError(str(e))

        if self.enum:
            value = self._unpack_enum(value)

        self._check_magic(value)

        self._value = value


class TagField(Field):
    """Fixed-length string: on disk it's zero-padded to exactly length bytes,
    trailing NULs are padding and not part of the value."""

    def __init__(self, length, default='', encoding='ascii', **kw):
        self.length = length
        self.encoding = encoding
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.value)

    def __len__(self):
        return self.length

    def _get_size(self):
        return self.length

    def _encode(self, value) -> bytes:
        encoded = value.encode(self.encoding)
        if len(encoded) > self.length:
            raise OversizeFieldError(
                '%r needs %d bytes but the field stores %d' % (value, len(encoded), self.length))

        return encoded.ljust(self.length, b'\x00')

    def _set_value(self, value):
        self._encode(value)
        super()._set_value(value)

    def _get_raw(self) -> bytes:
        return self._encode(self.value)

    def _set_raw(self, raw: bytes) -> None:
        if len(raw) != self.length:
            raise TruncatedInputError('tag needs %d bytes, got %d' % (self.length, len(raw)))

        try:
            value = raw.rstrip(b'\x00').decode(self.encoding)
        except UnicodeDecodeError as e:
            raise MalformedContainerError('tag %r is not %s: %s' % (raw, self.encoding, e))

        self._check_magic(value)

        self._value = value


class BytesField(Field):
    """Represent a contiguous run of bytes with a fixed length."""

    def __init__(self, length, default=None, **kw):
        self.length = length
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.value)

    def __len__(self):
        return self.length

    def value_from_default(self):
        return b'\x00' * self.length if self.default is None else self.default

    def _get_size(self):
        return self.length

    def _set_value(self, value) -> None:
        if len(value) > self.length:
            raise OversizeFieldError('0x%x bytes don\'t fit 0x%x' % (len(value), self.length))
        if len(value) != self.length:
            raise ValueError(f'you are trying to set a value with the wrong size (that is {self.length} bytes)')

        super()._set_value(bytes(value))

    def _get_raw(self) -> bytes:
        return self.value

    def _set_raw(self, raw: bytes) -> None:
        self.value = raw


class ArrayField(Field):
    '''Un/Pack an array of records.

    The number of elements is either an explicit integer or the name of a
    sibling field holding the count: in the latter case the sibling is kept
    in sync with the length of the array when packing.
    '''

    def __init__(self, field, n=0, **kw):
        self.field = field
        self._n = n
        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def value_from_default(self):
        count = self._n if isinstance(self._n, int) else 0
        return [self.instance_element() for _ in range(count)]

    def instance_element(self):
        return self.field.create(father=self)  # pass the father so that we don't lose the hierarchy

    def append(self, element):
        element.father = self
        self.value.append(element)

    def clear(self):
        self.value.clear()

    @property
    def n(self):
        if isinstance(self._n, int):
            return self._n

        return getattr(self.father, self._n).value

    def _get_size(self):
        return sum(element.size for element in self.value)

    def _get_raw(self) -> bytes:
        return b''.join(element.raw for element in self.value)

    def _update_value(self):
        if isinstance(self._n, str):
            getattr(self.father, self._n).value = len(self.value)
        else:
            self._n = len(self.value)

        for element in self.value:
            element._update_value()

    def relayout(self, offset=0):
        self.offset = offset
        size = 0
        for element in self.value:
            size += element.relayout(offset=offset + size)

        return size

    def unpack(self, cursor):
        self.offset = cursor.tell()
        elements = []
        for index in range(self.n):
            element = self.instance_element()
            try:
                element.unpack(cursor)
            except RescodecException as e:
                e.chain.append(str(index))
                raise
            elements.append(element)

        self.value = elements

    def pack(self, cursor):
        self.offset = cursor.tell()
        for element in self.value:
            element.pack(cursor)
