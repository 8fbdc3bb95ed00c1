"""
Core module for the fixed-layout records of a container format

"""
import logging
from typing import Tuple, List, Dict

from .fields import Field
from .meta import MetaRecord
from .streams import Cursor
from .exceptions import (
    RescodecException,
    TruncatedInputError,
)


logger = logging.getLogger(__name__)


class Record(Field, metaclass=MetaRecord):
    """
    Together with Field is the main class that defines a format: a Record is
    a sequence of fields with a byte layout known in advance, like a C struct.

    A Record can contain sub-records, since it's a Field itself:

        class Rect(Record):
            x1 = fields.StructField('i')
            ...

        class KeyFrame(Record):
            comment     = fields.TagField(48)
            coordinates = Rect()

    Passing some data to the constructor unpacks it right away.
    """

    def __init__(self, data=None, **kwargs):
        super().__init__(**kwargs)

        if data is not None:
            logger.debug('unpacking \'%s\' from %d bytes', self.__class__.__name__, len(data))
            self.unpack(Cursor(data))
        else:
            self.relayout()

    @classmethod
    def read(cls, cursor, **kwargs):
        '''Decode an instance at the current position of the cursor.'''
        record = cls(**kwargs)
        record.unpack(cursor)

        return record

    def write(self, cursor):
        self.pack(cursor)

        return self

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def __eq__(self, other):
        if not isinstance(other, Record):
            return NotImplemented

        return self.__class__ is other.__class__ and self.raw == other.raw

    __hash__ = None

    def init(self):
        for _, field in self.get_fields():
            field.init()

    def _get_value(self):
        return self

    def _set_value(self, value):
        raise AttributeError('a record can\'t be assigned directly, set its fields instead')

    def _get_size(self):
        '''the size MUST be derived from the fields'''
        return sum(field.size for _, field in self.get_fields())

    def _get_raw(self) -> bytes:
        self._update_value()
        return b''.join(field.raw for _, field in self.get_fields())

    def _set_raw(self, raw: bytes) -> None:
        self.unpack(Cursor(raw))

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        result = {}
        for name, field in self.get_fields():
            result[name] = (field.offset, field.size)

        return result

    def relayout(self, offset=0):
        '''Recompute the offsets of the fields with respect to the given one.'''
        self.offset = offset

        size = 0
        for _, field_instance in self.get_fields():
            size += field_instance.relayout(offset=offset + size)

        return size

    def _update_value(self):
        for _, field in self.get_fields():
            field._update_value()

    def pack(self, cursor):
        '''Write the fields one after the other starting from the actual position.'''
        self._update_value()
        self.offset = cursor.tell()

        for field_name, field_instance in self.get_fields():
            self.logger.debug('packing %s.%s at 0x%x', self.__class__.__name__, field_name, cursor.tell())
            try:
                field_instance.pack(cursor)
            except RescodecException as e:
                e.chain.append(field_name)
                raise

    def unpack(self, cursor):
        '''Take the binary data at the actual position and fill the fields.

        The check on the available bytes is done upfront so that a truncated
        stream fails before anything is decoded.'''
        offset = cursor.tell()
        available = cursor.remaining()
        if available < self.size:
            raise TruncatedInputError(
                '%s needs 0x%x bytes at offset 0x%x, only 0x%x available' % (
                    self.__class__.__name__, self.size, offset, available),
                chain=[self.__class__.__name__])

        for field_name, field in self.get_fields():
            self.logger.debug('unpacking %s.%s at 0x%x', self.__class__.__name__, field_name, cursor.tell())

            try:
                field.unpack(cursor)
            except RescodecException as e:
                e.chain.append(field_name)
                raise

        self.offset = offset

        if hasattr(self, 'validate'):
            self.validate()
