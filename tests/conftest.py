'''
Builders of synthetic containers: the bytes are assembled by hand with the
struct module, so that the codec is checked against the layout and not
against itself.
'''
import struct

import pytest


RW_VERSION = 0x1C020037

# chunk ids
STRUCT             = 0x01
STRING             = 0x02
EXTENSION          = 0x03
MATERIAL_LIST      = 0x08
FRAME_LIST         = 0x0E
GEOMETRY           = 0x0F
CLUMP              = 0x10
ATOMIC             = 0x14
TEXTURE_NATIVE     = 0x15
TEXTURE_DICTIONARY = 0x16
GEOMETRY_LIST      = 0x1A

UNKNOWN_PLUGIN = 0x0253F2FE


def chunk(chunk_id, payload=b'', version=RW_VERSION):
    return struct.pack('<III', chunk_id, len(payload), version) + payload


def sprite_header(tag=b'SPR4', texture_count=0, keyframe_count=0,
                  texture_table_offset=0x20, keyframe_table_offset=0x20,
                  flags=1, user_id=0, reserved=0, header_size=0x20, file_size=0):
    return struct.pack(
        '<HHi4siiHHii',
        flags, user_id, reserved, tag, header_size, file_size,
        texture_count, keyframe_count, texture_table_offset, keyframe_table_offset)


def keyframe(comment=b'sprite', texture_index=0, rect=(0, 0, 16, 16)):
    return struct.pack('<i48si32s4i24s', 0, comment, texture_index, b'', *rect, b'')


def tmx(payload, user_id=0):
    return struct.pack('<HHI4sI', 2, user_id, 0x10 + len(payload), b'TMX0', 0) + payload


def build_spr4_scenario():
    '''Two zero-length textures and one keyframe, laid out as

      0x00 header
      0x20 texture table (2 entries)
      0x30 keyframe table (1 entry)
      0x38 padding
      0x40 keyframe
      0xc0 both textures, the container end
    '''
    return (
        sprite_header(
            texture_count=2,
            keyframe_count=1,
            texture_table_offset=0x20,
            keyframe_table_offset=0x30,
        ) +
        struct.pack('<ii', 0, 0xc0) +
        struct.pack('<ii', 0, 0xc0) +
        struct.pack('<ii', 0, 0x40) +
        b'\x00' * 8 +
        keyframe(comment=b'placeholder', texture_index=1)
    )


def build_spr4_gapped():
    '''Two textures and one keyframe with the textures packed after a gap:
    every texture is followed by 16 zeros, the last one only in the stream
    (never written out), and there is no trailing padding.

      0x00 header
      0x20 texture table (2 entries)
      0x30 keyframe table (1 entry)
      0x38 padding
      0x40 keyframe
      0xc0 gap
      0xd0 first texture (0x13 bytes) and its gap
      0xf3 second texture (5 bytes), the container end at 0xf8
    '''
    return (
        sprite_header(
            texture_count=2,
            keyframe_count=1,
            texture_table_offset=0x20,
            keyframe_table_offset=0x30,
        ) +
        struct.pack('<ii', 0, 0xd0) +
        struct.pack('<ii', 0, 0xf3) +
        struct.pack('<ii', 0, 0x40) +
        b'\x00' * 8 +
        keyframe(comment=b'gapped', texture_index=0) +
        b'\x00' * 0x10 +
        b'\x01' * 0x13 + b'\x00' * 0x10 +
        b'\x02' * 0x05
    )


def build_scene():
    '''A texture dictionary and a clump with one frame, one geometry and one
    atomic binding them, plus an extension holding an unknown plugin.'''
    texture_native = chunk(TEXTURE_NATIVE,
        chunk(STRUCT, b'\x01\x02\x03\x04') +
        chunk(STRING, b'tex01\x00\x00\x00') +
        chunk(EXTENSION))
    dictionary = chunk(TEXTURE_DICTIONARY,
        chunk(STRUCT, struct.pack('<HH', 1, 0)) +
        texture_native +
        chunk(EXTENSION))

    frame = struct.pack('<9f3fiI', 1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0, 1.5, -2.0, 0.25, -1, 0)
    frame_list = chunk(FRAME_LIST,
        chunk(STRUCT, struct.pack('<I', 1) + frame) +
        chunk(EXTENSION))

    geometry = chunk(GEOMETRY,
        chunk(STRUCT, struct.pack('<Iiii', 0x00010006, 12, 8, 1) + b'\xaa' * 16) +
        chunk(MATERIAL_LIST, chunk(STRUCT, struct.pack('<i', 0))) +
        chunk(EXTENSION))
    geometry_list = chunk(GEOMETRY_LIST,
        chunk(STRUCT, struct.pack('<I', 1)) +
        geometry)

    atomic = chunk(ATOMIC,
        chunk(STRUCT, struct.pack('<iiii', 0, 0, 5, 0)) +
        chunk(EXTENSION))

    clump = chunk(CLUMP,
        chunk(STRUCT, struct.pack('<i', 1)) +
        frame_list +
        geometry_list +
        atomic +
        chunk(EXTENSION, chunk(UNKNOWN_PLUGIN, b'opaque!!')))

    return dictionary + clump


@pytest.fixture
def spr4_scenario():
    return build_spr4_scenario()


@pytest.fixture
def spr4_gapped():
    return build_spr4_gapped()


@pytest.fixture
def scene_bytes():
    return build_scene()
