from enum import Enum, Flag


class NodeKind(Enum):
    '''Chunk identifiers of the binary stream, plus two kinds that don't
    appear on disk: the scene root and the chunks we don't know about.'''
    SCENE              = -2
    OPAQUE             = -1
    STRUCT             = 0x01
    STRING             = 0x02
    EXTENSION          = 0x03
    TEXTURE            = 0x06
    MATERIAL           = 0x07
    MATERIAL_LIST      = 0x08
    FRAME_LIST         = 0x0E
    GEOMETRY           = 0x0F
    CLUMP              = 0x10
    ATOMIC             = 0x14
    TEXTURE_NATIVE     = 0x15
    TEXTURE_DICTIONARY = 0x16
    GEOMETRY_LIST      = 0x1A

    @classmethod
    def from_chunk_id(cls, chunk_id):
        try:
            kind = cls(chunk_id)
        except ValueError:
            return cls.OPAQUE

        return kind if kind.value >= 0 else cls.OPAQUE


class GeometryFlags(Flag):
    NONE               = 0
    TRISTRIP           = 1 << 0
    POSITIONS          = 1 << 1
    TEXTURED           = 1 << 2
    PRELIT             = 1 << 3
    NORMALS            = 1 << 4
    LIGHT              = 1 << 5
    MODULATE_MATERIAL  = 1 << 6
    TEXTURED2          = 1 << 7
    NATIVE             = 1 << 24


# library stamp used by the files this codec targets
DEFAULT_VERSION = 0x1C020037
