'''
# Texture payloads

SPR4 containers embed plain TGA files: nothing in the payload tells its length,
so it's derived from the pointer table (see PointerTable.payload_sizes()).

SPR0 containers embed TMX files instead, whose header stores the total size.
'''
import io
import logging
from enum import Enum

from bitstring import BitArray
from PIL import Image

from ..core import Record
from .. import fields
from ..meta import Compliant
from ..exceptions import MalformedContainerError, UnsupportedFormatError


logger = logging.getLogger(__name__)


class TgaImageType(Enum):
    NONE            = 0
    COLORMAPPED     = 1
    TRUECOLOR       = 2
    GRAYSCALE       = 3
    RLE_COLORMAPPED = 9
    RLE_TRUECOLOR   = 10
    RLE_GRAYSCALE   = 11


class TgaHeader(Record):
    id_length       = fields.StructField('B')
    colormap_type   = fields.StructField('B')
    image_type      = fields.StructField('B', enum=TgaImageType)
    colormap_origin = fields.StructField('H')
    colormap_length = fields.StructField('H')
    colormap_depth  = fields.StructField('B')
    x_origin        = fields.StructField('H')
    y_origin        = fields.StructField('H')
    width           = fields.StructField('H')
    height          = fields.StructField('H')
    depth           = fields.StructField('B')
    descriptor      = fields.StructField('B')

    def _descriptor_bits(self):
        return BitArray(uint=self.descriptor.value, length=8)

    @property
    def alpha_bits(self):
        return self._descriptor_bits()[4:8].uint

    @property
    def right_to_left(self):
        return self._descriptor_bits()[3]

    @property
    def top_to_bottom(self):
        return self._descriptor_bits()[2]

    def __str__(self):
        return '%dx%dx%d' % (
            self.width.value,
            self.height.value,
            self.depth.value,
        )


class Texture(object):
    '''An opaque image payload, kept as bytes for a lossless round trip.'''

    # the payload stores its own length
    SELF_SIZED = False

    def __init__(self, data=b'', type_id=0):
        self.data = bytes(data)
        self.type_id = type_id

    def __repr__(self):
        return '<%s(size=0x%x)>' % (self.__class__.__name__, self.size)

    def __eq__(self, other):
        if not isinstance(other, Texture):
            return NotImplemented

        return self.__class__ is other.__class__ and (self.data, self.type_id) == (other.data, other.type_id)

    __hash__ = None

    @property
    def size(self):
        return len(self.data)

    @classmethod
    def read(cls, cursor, size=None, end=None, type_id=0, compliant=Compliant.INHERIT):
        if size is None:
            raise ValueError('%s needs an explicit size' % cls.__name__)

        return cls(cursor.read_exact(size), type_id=type_id)

    def write(self, cursor):
        cursor.write(self.data)

    @property
    def header(self):
        '''The TGA header, None for the placeholders shorter than that.'''
        if len(self.data) < TgaHeader().size:
            return None

        return TgaHeader(self.data[:TgaHeader().size])

    def to_image(self):
        image = Image.open(io.BytesIO(self.data))
        image.load()

        return image

    @classmethod
    def from_image(cls, image, type_id=0):
        buffer = io.BytesIO()
        image.save(buffer, format='TGA')

        return cls(buffer.getvalue(), type_id=type_id)


class TmxHeader(Record):
    flags     = fields.StructField('H', default=0x0002)
    user_id   = fields.StructField('H')
    file_size = fields.StructField('I')
    tag       = fields.TagField(4, default='TMX0', is_magic=True)
    reserved  = fields.StructField('I')


class TmxTexture(Texture):

    SELF_SIZED = True

    @classmethod
    def read(cls, cursor, size=None, end=None, type_id=0, compliant=Compliant.INHERIT):
        end = cursor.size if end is None else end
        start = cursor.tell()
        header = TmxHeader.read(cursor, compliant=compliant)

        size = header.file_size.value
        if size < header.size or start + size > end:
            raise MalformedContainerError(
                'TMX at 0x%x declares 0x%x bytes, 0x%x available' % (start, size, end - start))

        cursor.seek(start)
        logger.debug('reading TMX of 0x%x bytes at 0x%x', size, start)

        return cls(cursor.read_exact(size), type_id=type_id)

    @property
    def header(self):
        if len(self.data) < TmxHeader().size:
            return None

        return TmxHeader(self.data[:TmxHeader().size])

    def to_image(self):
        raise UnsupportedFormatError('no image conversion for TMX textures')

    @classmethod
    def from_image(cls, image, type_id=0):
        raise UnsupportedFormatError('no image conversion for TMX textures')
