from ..core import Record
from .. import fields


class Rect(Record):
    x1 = fields.StructField('i')
    y1 = fields.StructField('i')
    x2 = fields.StructField('i')
    y2 = fields.StructField('i')

    @property
    def width(self):
        return self.x2.value - self.x1.value

    @property
    def height(self):
        return self.y2.value - self.y1.value


class KeyFrame(Record):
    '''
    Sprite descriptor: a 0x80 bytes record that cuts a rectangle out of one
    of the textures of the container.

      0x00  unknown
      0x04  comment, 48 bytes zero padded
      0x34  index of the texture in the container
      0x38  unknown, 32 bytes
      0x58  coordinates (x1, y1, x2, y2) in pixels
      0x68  unknown, 24 bytes
    '''
    unknown_00    = fields.StructField('i')
    comment       = fields.TagField(48, encoding='latin-1')
    texture_index = fields.StructField('i')
    unknown_38    = fields.BytesField(0x20)
    coordinates   = Rect()
    unknown_68    = fields.BytesField(0x18)

    # type stored in the pointer table entry
    type_id = 0

    def __str__(self):
        return '%r texture=%d %dx%d' % (
            self.comment.value,
            self.texture_index.value,
            self.coordinates.width,
            self.coordinates.height,
        )
