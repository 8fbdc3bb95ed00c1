'''
# Sprite containers

A sprite container packs some textures and the keyframes (sprites) cut out of
them. The layout is

  .----------------------------------.
  | header (0x20 bytes)              |
  | texture pointer table            |
  | keyframe pointer table           |
  | keyframe 1 ... keyframe N        |
  | texture 1 ... texture M          |
  '----------------------------------'

where the header stores the offsets of the two tables and each table entry
the offset of its payload, all of them relative to the start of the container
(a container can live inside another file).

When writing, the header and the tables are reserved first and backfilled
once all the payloads are in place.
'''
import logging

from ..core import Record
from .. import fields
from ..meta import Compliant
from ..tables import PointerTable, TypePointerEntry
from ..exceptions import (
    RescodecException,
    MagicException,
    MalformedContainerError,
    UnsupportedFormatError,
)
from .keyframe import KeyFrame, Rect
from .texture import Texture, TmxTexture, TgaHeader, TmxHeader


logger = logging.getLogger(__name__)


class SpriteHeader(Record):
    flags                 = fields.StructField('H', default=0x0001)
    user_id               = fields.StructField('H')
    reserved              = fields.StructField('i')
    tag                   = fields.TagField(4)
    header_size           = fields.StructField('i', default=0x20)
    file_size             = fields.StructField('i')
    texture_count         = fields.StructField('H')
    keyframe_count        = fields.StructField('H')
    texture_table_offset  = fields.StructField('i')
    keyframe_table_offset = fields.StructField('i')


def padding(position, boundary):
    '''Bytes needed to bring position to a multiple of boundary, none without a boundary.'''
    return -position % boundary if boundary else 0


class SpriteLayout(object):
    '''How a writer lays out the payloads of a container.

    keyframe_alignment and texture_alignment are applied before each element
    of their group, group_alignment before the first element of each group.
    texture_gap bytes are skipped before the first texture (then the group
    alignment applies), trailing_alignment pads the end of the container.
    Alignments are relative to the container start.'''

    def __init__(self, keyframe_alignment=None, texture_alignment=None, group_alignment=None,
                 texture_gap=0, trailing_alignment=None, stores_file_size=False):
        self.keyframe_alignment = keyframe_alignment
        self.texture_alignment = texture_alignment
        self.group_alignment = group_alignment
        self.texture_gap = texture_gap
        self.trailing_alignment = trailing_alignment
        self.stores_file_size = stores_file_size

    def __repr__(self):
        return '<%s(keyframe=%r, texture=%r, group=%r, gap=%r, trailing=%r)>' % (
            self.__class__.__name__,
            self.keyframe_alignment,
            self.texture_alignment,
            self.group_alignment,
            self.texture_gap,
            self.trailing_alignment,
        )

    def place(self, position, sizes, alignment, gap=0):
        '''Offsets of a group of payloads of the given sizes starting at position,
        plus the position after the group.'''
        offsets = []
        if sizes:
            position += gap
            position += padding(position, self.group_alignment)

        for size in sizes:
            position += padding(position, alignment)
            offsets.append(position)
            position += size

        return offsets, position

    def plan(self, tables_end, keyframe_sizes, texture_sizes):
        '''Where this layout puts keyframes and textures, and the container size.'''
        keyframe_offsets, position = self.place(tables_end, keyframe_sizes, self.keyframe_alignment)
        texture_offsets, position = self.place(
            position, texture_sizes, self.texture_alignment, self.texture_gap)

        return keyframe_offsets, texture_offsets, position + padding(position, self.trailing_alignment)


# every payload aligned to 16, the container padded to 64
SPR4_LAYOUT = SpriteLayout(keyframe_alignment=16, texture_alignment=16, trailing_alignment=64)
# the textures packed after a 16 bytes gap, no trailing padding
SPR4_GAPPED_LAYOUT = SpriteLayout(keyframe_alignment=16, group_alignment=16, texture_gap=16)
SPR0_LAYOUT = SpriteLayout(group_alignment=16, stores_file_size=True)


class SpriteContainer(object):
    '''Base class for the sprite container formats, subclasses set the constants.'''

    TAG = None
    FLAGS = 0x0001
    HEADER_SIZE = 0x20
    LAYOUT = None
    LAYOUTS = ()
    TEXTURE_CLASS = Texture

    def __init__(self, textures=None, keyframes=None, user_id=0, reserved=0, file_size=0, layout=None):
        self.textures = list(textures) if textures is not None else []
        self.keyframes = list(keyframes) if keyframes is not None else []
        self.user_id = user_id
        self.reserved = reserved
        self.file_size = file_size
        # decoding keeps the layout the container was found in
        self.layout = layout if layout is not None else self.LAYOUT

    def __repr__(self):
        return '<%s(textures=%d, keyframes=%d)>' % (
            self.__class__.__name__, self.texture_count, self.keyframe_count)

    @property
    def texture_count(self):
        return len(self.textures)

    @property
    def keyframe_count(self):
        return len(self.keyframes)

    def texture_for(self, keyframe):
        '''The texture a keyframe is cut from.'''
        index = keyframe.texture_index.value
        if not 0 <= index < len(self.textures):
            raise MalformedContainerError(
                'keyframe refers to texture %d, the container has %d' % (index, len(self.textures)))

        return self.textures[index]

    @classmethod
    def read_header(cls, cursor, compliant=Compliant.MAGIC):
        header = SpriteHeader.read(cursor, compliant=compliant)

        if header.tag.value != cls.TAG:
            logger.warning('tag is %r instead of %r', header.tag.value, cls.TAG)
            if compliant & Compliant.MAGIC:
                raise MagicException('expected tag %r, found %r' % (cls.TAG, header.tag.value), chain=['tag'])

        if header.flags.value != cls.FLAGS or header.header_size.value != cls.HEADER_SIZE:
            raise UnsupportedFormatError('%s with flags 0x%04x and header size 0x%x' % (
                header.tag.value, header.flags.value, header.header_size.value))

        if header.reserved.value:
            logger.warning('reserved header field is 0x%x', header.reserved.value)

        return header

    @classmethod
    def read(cls, cursor, end=None, compliant=Compliant.MAGIC):
        '''Decode a container starting at the current position of the cursor.

        end bounds the container, defaulting to the end of the stream: nested
        containers without a stored size need it to size their last texture.'''
        start = cursor.tell()
        end = cursor.size if end is None else end
        logger.debug('reading %s at 0x%x', cls.__name__, start)

        header = cls.read_header(cursor, compliant=compliant)

        if cls.LAYOUT.stores_file_size:
            file_size = header.file_size.value
            if file_size < cls.HEADER_SIZE or start + file_size > end:
                raise MalformedContainerError(
                    'file size 0x%x doesn\'t fit in 0x%x bytes' % (file_size, end - start), chain=['file_size'])
            end = start + file_size

        texture_table = PointerTable.load(
            cursor, start, header.texture_table_offset.value, header.texture_count.value,
            entry_cls=TypePointerEntry, end=end)
        keyframe_table = PointerTable.load(
            cursor, start, header.keyframe_table_offset.value, header.keyframe_count.value,
            entry_cls=TypePointerEntry, end=end)

        container = cls(
            user_id=header.user_id.value,
            reserved=header.reserved.value,
            file_size=header.file_size.value,
        )

        try:
            container.textures = cls._read_textures(cursor, start, end, texture_table, compliant)
        except RescodecException as e:
            e.chain.append('textures')
            raise

        try:
            container.keyframes = cls._read_keyframes(cursor, start, end, keyframe_table)
        except RescodecException as e:
            e.chain.append('keyframes')
            raise

        container.layout = cls.detect_layout(header, texture_table, keyframe_table, container, end - start)

        cursor.seek(end)

        return container

    @classmethod
    def detect_layout(cls, header, texture_table, keyframe_table, container, size):
        '''The first of the known layouts that puts the tables, the payloads and
        the end of the container where they were found.

        Without a match the default layout is used, and writing moves things around.'''
        entry_size = texture_table.entry_size
        tables_end = cls.HEADER_SIZE + entry_size * (len(texture_table) + len(keyframe_table))
        found = (
            [_.data_offset.value for _ in keyframe_table],
            [_.data_offset.value for _ in texture_table],
            size,
        )

        if (header.texture_table_offset.value, header.keyframe_table_offset.value) == (
                cls.HEADER_SIZE, cls.HEADER_SIZE + entry_size * len(texture_table)):
            keyframe_sizes = [_.size for _ in container.keyframes]
            texture_sizes = [_.size for _ in container.textures]

            for layout in cls.LAYOUTS:
                if layout.plan(tables_end, keyframe_sizes, texture_sizes) == found:
                    logger.debug('%s laid out as %r', cls.__name__, layout)
                    return layout

        logger.warning('%s of 0x%x bytes doesn\'t follow a known layout, it will be written as %r',
                       cls.__name__, size, cls.LAYOUT)

        return cls.LAYOUT

    @classmethod
    def _read_textures(cls, cursor, start, end, table, compliant):
        if cls.TEXTURE_CLASS.SELF_SIZED:
            sizes = [None] * len(table)
        else:
            sizes = table.payload_sizes(start, end)

        textures = []
        for index, size in enumerate(sizes):
            try:
                cursor.seek(table.target(index, start, end))
                texture = cls.TEXTURE_CLASS.read(
                    cursor, size=size, end=end, type_id=table[index].type_id.value, compliant=compliant)
            except RescodecException as e:
                e.chain.append(str(index))
                raise
            textures.append(texture)

        return textures

    @classmethod
    def _read_keyframes(cls, cursor, start, end, table):
        keyframes = []
        for index in range(len(table)):
            try:
                keyframes.append(cls._read_keyframe(cursor, start, end, table, index))
            except RescodecException as e:
                e.chain.append(str(index))
                raise

        return keyframes

    @classmethod
    def _read_keyframe(cls, cursor, start, end, table, index):
        cursor.seek(table.target(index, start, end))
        if cursor.tell() + KeyFrame().size > end:
            raise MalformedContainerError('keyframe %d crosses the container end' % index)

        keyframe = KeyFrame.read(cursor)
        keyframe.type_id = table[index].type_id.value

        return keyframe

    def header_shell(self):
        '''A header with the counts in place and the offsets still to be known.'''
        header = SpriteHeader()
        header.flags.value = self.FLAGS
        header.user_id.value = self.user_id
        header.reserved.value = self.reserved
        header.tag.value = self.TAG
        header.header_size.value = self.HEADER_SIZE
        header.file_size.value = self.file_size
        # OversizeFieldError beyond 0xffff elements
        header.texture_count.value = len(self.textures)
        header.keyframe_count.value = len(self.keyframes)

        return header

    def write(self, cursor):
        '''Encode the container at the current position following self.layout,
        leaving the cursor after its last byte.'''
        start = cursor.tell()
        layout = self.layout
        logger.debug('writing %r at 0x%x as %r', self, start, layout)

        header = self.header_shell()
        cursor.reserve(header.size)

        texture_table = PointerTable.create(len(self.textures), TypePointerEntry)
        keyframe_table = PointerTable.create(len(self.keyframes), TypePointerEntry)

        header.texture_table_offset.value = texture_table.reserve(cursor, start)
        header.keyframe_table_offset.value = keyframe_table.reserve(cursor, start)

        self._write_group(cursor, start, keyframe_table, self.keyframes, layout.keyframe_alignment)
        self._write_group(cursor, start, texture_table, self.textures, layout.texture_alignment,
                          gap=layout.texture_gap)

        if layout.trailing_alignment:
            cursor.align(layout.trailing_alignment, start)

        end = cursor.tell()
        if layout.stores_file_size:
            header.file_size.value = end - start

        texture_table.backfill(cursor, start)
        keyframe_table.backfill(cursor, start)

        cursor.seek(start)
        header.write(cursor)

        cursor.seek(end)

        return end - start

    def _write_group(self, cursor, start, table, elements, alignment, gap=0):
        if elements:
            cursor.write(b'\x00' * gap)
            if self.layout.group_alignment:
                cursor.align(self.layout.group_alignment, start)

        for index, element in enumerate(elements):
            if alignment:
                cursor.align(alignment, start)

            entry = table[index]
            entry.type_id.value = element.type_id
            entry.data_offset.value = cursor.relative(start)
            logger.debug('%s %d at relative 0x%x', element.__class__.__name__, index, entry.data_offset.value)

            element.write(cursor)


class Spr4Container(SpriteContainer):
    '''Sprite container with TGA textures.

    Two layouts are around: every payload aligned to 16 bytes and the whole
    container padded to 64 (the default), or the textures packed after a 16
    bytes gap with no padding at the end. A decoded container is written
    back in the layout it was found in.'''
    TAG = 'SPR4'
    LAYOUT = SPR4_LAYOUT
    LAYOUTS = (SPR4_LAYOUT, SPR4_GAPPED_LAYOUT)
    TEXTURE_CLASS = Texture


class Spr0Container(SpriteContainer):
    '''Sprite container with TMX textures and the total size in the header.'''
    TAG = 'SPR0'
    LAYOUT = SPR0_LAYOUT
    LAYOUTS = (SPR0_LAYOUT,)
    TEXTURE_CLASS = TmxTexture


SPRITE_CONTAINERS = {
    Spr4Container.TAG: Spr4Container,
    Spr0Container.TAG: Spr0Container,
}


__all__ = [
    'SpriteHeader',
    'SpriteLayout',
    'SpriteContainer',
    'Spr4Container',
    'Spr0Container',
    'SPRITE_CONTAINERS',
    'SPR4_LAYOUT',
    'SPR4_GAPPED_LAYOUT',
    'SPR0_LAYOUT',
    'KeyFrame',
    'Rect',
    'Texture',
    'TmxTexture',
    'TgaHeader',
    'TmxHeader',
]
