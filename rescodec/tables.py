"""
# Pointer tables

A pointer table (directory) is an array of fixed-size entries stored inside the
container body: each entry locates a variable-length sub-record through an
offset that is always relative to the first byte of the owning container.

Writing is done in two passes: the table space is reserved before the
sub-records are written, and backfilled once their offsets are known.
"""
import logging

from .core import Record
from . import fields
from .exceptions import MalformedContainerError


logger = logging.getLogger(__name__)


class PointerEntry(Record):
    data_offset = fields.StructField('i')


class TypePointerEntry(Record):
    type_id     = fields.StructField('i')
    data_offset = fields.StructField('i')


class PointerTable(object):
    '''An ordered list of entries plus the container-relative offset where they live.'''

    def __init__(self, entry_cls=TypePointerEntry, entries=None, offset=None):
        self.entry_cls = entry_cls
        self.entries = list(entries) if entries is not None else []
        self.offset = offset

    def __repr__(self):
        return '<%s(n=%d, offset=%r)>' % (self.__class__.__name__, len(self.entries), self.offset)

    def __len__(self):
        return len(self.entries)

    def __getitem__(self, item):
        return self.entries[item]

    def __iter__(self):
        return iter(self.entries)

    @property
    def entry_size(self):
        return self.entry_cls().size

    @property
    def size(self):
        return self.entry_size * len(self.entries)

    @classmethod
    def create(cls, count, entry_cls=TypePointerEntry):
        '''A table with count zeroed entries, to be filled while writing.'''
        return cls(entry_cls, entries=[entry_cls() for _ in range(count)])

    @classmethod
    def load(cls, cursor, container_start, offset, count, entry_cls=TypePointerEntry, end=None):
        '''Decode count entries at container_start + offset, wherever the cursor is.'''
        end = cursor.size if end is None else end
        table = cls(entry_cls, offset=offset)

        start = container_start + offset
        if offset < 0 or start + count * table.entry_size > end:
            raise MalformedContainerError(
                'table of %d %s at offset 0x%x exceeds the container end 0x%x' % (
                    count, entry_cls.__name__, offset, end - container_start))

        cursor.seek(start)
        logger.debug('loading %d %s at 0x%x (relative 0x%x)', count, entry_cls.__name__, start, offset)
        table.entries = [entry_cls.read(cursor) for _ in range(count)]

        return table

    def reserve(self, cursor, container_start):
        '''Skip the room for the entries writing zeros, returning the relative offset.'''
        self.offset = cursor.reserve(self.size) - container_start
        logger.debug('reserved 0x%x bytes for %d entries at relative 0x%x', self.size, len(self), self.offset)

        return self.offset

    def backfill(self, cursor, container_start):
        '''Write the entries at the reserved position, leaving the cursor where it was.'''
        if self.offset is None:
            raise ValueError('backfill() called on a table never reserved')

        with cursor.saved():
            cursor.seek(container_start + self.offset)
            for entry in self.entries:
                entry.write(cursor)

    def target(self, index, container_start, end):
        '''Absolute position of the payload of the entry at index, checked against end.'''
        data_offset = self.entries[index].data_offset.value
        position = container_start + data_offset
        if data_offset < 0 or position > end:
            raise MalformedContainerError(
                'entry %d points to 0x%x, past the container end 0x%x' % (
                    index, data_offset, end - container_start))

        return position

    def payload_sizes(self, container_start, end):
        '''Sizes of payloads that don't store their own length.

        Each one extends up to the next entry's offset, the last one up to end:
        this works only if the payloads were written in increasing order.'''
        positions = [self.target(index, container_start, end) for index in range(len(self))]
        sizes = []
        for index, position in enumerate(positions):
            following = positions[index + 1] if index + 1 < len(positions) else end
            if following < position:
                raise MalformedContainerError(
                    'entry %d at 0x%x is followed by an entry at 0x%x' % (
                        index, position - container_start, following - container_start),
                    chain=[str(index)])
            sizes.append(following - position)

        return sizes
