"""
Chunks of the binary stream and their payloads.

Every chunk starts with a 12 bytes header (id, payload size, version): the
payload is either raw data (struct, string and unknown chunks) or a sequence
of child chunks. Container chunks usually begin with a struct child whose
first fields count the other children: those counts are checked when reading
and regenerated when writing.
"""
import logging

from ..core import Record
from .. import fields
from ..graph import ResourceNode, MAX_DEPTH
from ..streams import Cursor
from ..exceptions import (
    RescodecException,
    TruncatedInputError,
    MalformedContainerError,
)
from .enum import NodeKind, GeometryFlags, DEFAULT_VERSION


logger = logging.getLogger(__name__)


class ChunkHeader(Record):
    chunk_id     = fields.StructField('I')
    payload_size = fields.StructField('I')
    version      = fields.StructField('I')


HEADER_SIZE = ChunkHeader().size

NODE_CLASSES = {}


def register_node(kind):
    def decorator(cls):
        cls.kind = kind
        NODE_CLASSES[kind] = cls
        return cls

    return decorator


def read_node(cursor, end=None, depth=0):
    '''Decode the chunk at the current position, that must not cross end.'''
    end = cursor.size if end is None else end
    start = cursor.tell()

    if depth > MAX_DEPTH:
        raise MalformedContainerError('chunks nested deeper than %d' % MAX_DEPTH)

    if end - start < HEADER_SIZE:
        raise TruncatedInputError('chunk header at 0x%x needs 0x%x bytes, 0x%x available' % (
            start, HEADER_SIZE, end - start))

    header = ChunkHeader.read(cursor)
    chunk_id = header.chunk_id.value
    payload_end = cursor.tell() + header.payload_size.value

    if payload_end > cursor.size:
        raise TruncatedInputError('chunk 0x%x at 0x%x needs 0x%x bytes, the stream ends at 0x%x' % (
            chunk_id, start, payload_end, cursor.size))

    if payload_end > end:
        raise MalformedContainerError('chunk 0x%x at 0x%x ends at 0x%x, past its parent end 0x%x' % (
            chunk_id, start, payload_end, end))

    kind = NodeKind.from_chunk_id(chunk_id)
    if kind is NodeKind.OPAQUE:
        node = OpaqueNode(chunk_id, version=header.version.value)
    else:
        node = NODE_CLASSES[kind](version=header.version.value)

    logger.debug('%s chunk at 0x%x, payload 0x%x bytes', kind.name, start, header.payload_size.value)

    try:
        node.read_payload(cursor, payload_end, depth)
    except RescodecException as e:
        e.chain.append('%s@0x%x' % (kind.name, start))
        raise

    if cursor.tell() != payload_end:
        raise MalformedContainerError('%s chunk at 0x%x left 0x%x bytes unread' % (
            kind.name, start, payload_end - cursor.tell()))

    return node


class RwNode(ResourceNode):
    '''A chunk of the binary stream.'''

    def __init__(self, version=DEFAULT_VERSION):
        super().__init__()
        self.version = version

    def __repr__(self):
        return '<%s(id=0x%x, version=0x%08x, children=%d)>' % (
            self.__class__.__name__, self.chunk_id, self.version, len(self.children))

    @property
    def chunk_id(self):
        return self.kind.value

    def read_payload(self, cursor, end, depth):
        raise NotImplementedError()

    def write_payload(self, cursor):
        raise NotImplementedError()

    def write(self, cursor):
        '''Header first with a zero size, then the payload, then the real size.'''
        start = cursor.tell()
        header = ChunkHeader()
        header.chunk_id.value = self.chunk_id
        header.version.value = self.version
        cursor.reserve(header.size)

        self.write_payload(cursor)

        end = cursor.tell()
        header.payload_size.value = end - start - header.size

        cursor.seek(start)
        header.write(cursor)
        cursor.seek(end)

        return end - start

    @property
    def scene(self):
        '''The scene this node belongs to, None once the scene is gone:
        the node doesn't keep it alive.'''
        return self.find_ancestor(NodeKind.SCENE)


class DataNode(RwNode):
    '''A chunk whose payload is kept as raw bytes.'''

    def __init__(self, data=b'', version=DEFAULT_VERSION):
        super().__init__(version=version)
        self.data = bytes(data)

    def read_payload(self, cursor, end, depth):
        self.data = cursor.read_exact(end - cursor.tell())

    def write_payload(self, cursor):
        cursor.write(self.data)


@register_node(NodeKind.STRUCT)
class StructNode(DataNode):
    pass


class OpaqueNode(DataNode):
    '''A chunk of unknown kind: its payload is preserved and never interpreted.'''

    kind = NodeKind.OPAQUE

    def __init__(self, chunk_id, data=b'', version=DEFAULT_VERSION):
        super().__init__(data=data, version=version)
        self._chunk_id = chunk_id

    @property
    def chunk_id(self):
        return self._chunk_id


@register_node(NodeKind.STRING)
class StringNode(RwNode):
    '''Zero terminated string, padded to a multiple of 4 bytes.'''

    def __init__(self, value='', version=DEFAULT_VERSION):
        super().__init__(version=version)
        self.value = value
        self._stored_size = 0

    def read_payload(self, cursor, end, depth):
        raw = cursor.read_exact(end - cursor.tell())
        self._stored_size = len(raw)
        self.value = raw.rstrip(b'\x00').decode('latin-1')

    def write_payload(self, cursor):
        raw = self.value.encode('latin-1')
        # keep the original padding while there is room for the terminator
        size = self._stored_size if len(raw) < self._stored_size else (len(raw) + 4) & ~3
        cursor.write(raw.ljust(size, b'\x00'))


class ContainerNode(RwNode):
    '''A chunk made of child chunks.

    STRUCT_RECORD, when set, describes the beginning of the struct child: it's
    decoded into "info", the rest of the struct data is kept as it is.'''

    STRUCT_RECORD = None

    def __init__(self, version=DEFAULT_VERSION):
        super().__init__(version=version)
        self.info = None
        self.info_trailing = b''
        # bytes after the last child too short to be a chunk
        self.trailing = b''

    def read_payload(self, cursor, end, depth):
        while end - cursor.tell() >= HEADER_SIZE:
            self.add_child(read_node(cursor, end, depth + 1))

        self.trailing = cursor.read_exact(end - cursor.tell())

        self.parse_struct()

    def write_payload(self, cursor):
        self.update_struct()

        for child in self.children:
            child.write(cursor)

        cursor.write(self.trailing)

    @property
    def struct(self):
        return self.find_child(NodeKind.STRUCT)

    def parse_struct(self):
        if self.STRUCT_RECORD is None:
            return

        struct = self.struct
        if struct is None:
            raise MalformedContainerError('%s without struct chunk' % self.kind.name)

        cursor = Cursor(struct.data)
        try:
            self.info = self.STRUCT_RECORD.read(cursor)
        except RescodecException as e:
            e.chain.append('struct')
            raise
        self.info_trailing = cursor.read()

        self.check_struct()

    def check_struct(self):
        pass

    def sync_struct(self):
        pass

    def update_struct(self):
        if self.info is None:
            return

        self.sync_struct()
        self.struct.data = self.info.raw + self.info_trailing


@register_node(NodeKind.EXTENSION)
class ExtensionNode(ContainerNode):
    pass


@register_node(NodeKind.TEXTURE)
class TextureNode(ContainerNode):

    @property
    def names(self):
        return [_.value for _ in self.find_children(NodeKind.STRING)]


@register_node(NodeKind.MATERIAL)
class MaterialNode(ContainerNode):
    pass


@register_node(NodeKind.MATERIAL_LIST)
class MaterialListNode(ContainerNode):

    @property
    def materials(self):
        return self.find_children(NodeKind.MATERIAL)


@register_node(NodeKind.TEXTURE_NATIVE)
class TextureNativeNode(ContainerNode):
    pass


@register_node(NodeKind.TEXTURE_DICTIONARY)
class TextureDictionaryNode(ContainerNode):

    @property
    def textures(self):
        return self.find_children(NodeKind.TEXTURE_NATIVE)


class Frame(Record):
    '''Transform of a frame: 3x3 rotation, position, index of the parent frame.'''
    rotation     = fields.ArrayField(fields.StructField('f'), n=9)
    position     = fields.ArrayField(fields.StructField('f'), n=3)
    parent_index = fields.StructField('i', default=-1)
    flags        = fields.StructField('I')


class FrameListStruct(Record):
    frame_count = fields.StructField('I')
    frames      = fields.ArrayField(Frame(), n='frame_count')


@register_node(NodeKind.FRAME_LIST)
class FrameListNode(ContainerNode):
    STRUCT_RECORD = FrameListStruct

    @property
    def frames(self):
        return self.info.frames.value if self.info else []

    def frame_parent(self, frame):
        '''The parent frame of frame, None for the root frames.'''
        index = frame.parent_index.value
        if index < 0:
            return None

        if index >= len(self.frames):
            raise MalformedContainerError('frame parent %d out of %d frames' % (index, len(self.frames)))

        return self.frames[index]


class GeometryListStruct(Record):
    geometry_count = fields.StructField('I')


@register_node(NodeKind.GEOMETRY_LIST)
class GeometryListNode(ContainerNode):
    STRUCT_RECORD = GeometryListStruct

    @property
    def geometries(self):
        return self.find_children(NodeKind.GEOMETRY)

    def check_struct(self):
        if self.info.geometry_count.value != len(self.geometries):
            raise MalformedContainerError('geometry list declares %d geometries, found %d' % (
                self.info.geometry_count.value, len(self.geometries)))

    def sync_struct(self):
        self.info.geometry_count.value = len(self.geometries)


class GeometryStruct(Record):
    format_flags       = fields.StructField('I')
    triangle_count     = fields.StructField('i')
    vertex_count       = fields.StructField('i')
    morph_target_count = fields.StructField('i')


GEOMETRY_FLAGS_MASK = sum(_.value for _ in GeometryFlags)


@register_node(NodeKind.GEOMETRY)
class GeometryNode(ContainerNode):
    STRUCT_RECORD = GeometryStruct

    @property
    def flags(self):
        return GeometryFlags(self.info.format_flags.value & GEOMETRY_FLAGS_MASK)

    @property
    def uv_set_count(self):
        count = (self.info.format_flags.value >> 16) & 0xff
        if count:
            return count

        if self.flags & GeometryFlags.TEXTURED2:
            return 2

        return 1 if self.flags & GeometryFlags.TEXTURED else 0

    @property
    def triangle_count(self):
        return self.info.triangle_count.value

    @property
    def vertex_count(self):
        return self.info.vertex_count.value

    @property
    def material_list(self):
        return self.find_child(NodeKind.MATERIAL_LIST)


class ClumpStruct(Record):
    atomic_count = fields.StructField('i')


@register_node(NodeKind.CLUMP)
class ClumpNode(ContainerNode):
    '''A model: frames, geometries, and the atomics binding one to the other.'''
    STRUCT_RECORD = ClumpStruct

    @property
    def frame_list(self):
        return self.find_child(NodeKind.FRAME_LIST)

    @property
    def geometry_list(self):
        return self.find_child(NodeKind.GEOMETRY_LIST)

    @property
    def atomics(self):
        return self.find_children(NodeKind.ATOMIC)

    @property
    def frames(self):
        return self.frame_list.frames if self.frame_list else []

    @property
    def geometries(self):
        return self.geometry_list.geometries if self.geometry_list else []

    def check_struct(self):
        if self.info.atomic_count.value != len(self.atomics):
            raise MalformedContainerError('clump declares %d atomics, found %d' % (
                self.info.atomic_count.value, len(self.atomics)))

    def sync_struct(self):
        self.info.atomic_count.value = len(self.atomics)


class AtomicStruct(Record):
    frame_index    = fields.StructField('i')
    geometry_index = fields.StructField('i')
    flags          = fields.StructField('i')
    unused         = fields.StructField('i')


@register_node(NodeKind.ATOMIC)
class AtomicNode(ContainerNode):
    '''Binds a geometry of the clump to one of its frames, by index.'''
    STRUCT_RECORD = AtomicStruct

    @property
    def frame_index(self):
        return self.info.frame_index.value

    @property
    def geometry_index(self):
        return self.info.geometry_index.value

    @property
    def clump(self):
        return self.find_ancestor(NodeKind.CLUMP)

    def _resolve(self, elements, index, what):
        if not 0 <= index < len(elements):
            raise MalformedContainerError('atomic refers to %s %d, the clump has %d' % (what, index, len(elements)))

        return elements[index]

    @property
    def geometry(self):
        '''The geometry bound to this atomic, resolved through the enclosing
        clump. None when the atomic is not linked, which happens also when
        nobody holds the root of the graph any more.'''
        clump = self.clump
        if clump is None:
            return None

        return self._resolve(clump.geometries, self.geometry_index, 'geometry')

    @property
    def frame(self):
        '''Like geometry, the clump must still be reachable from the caller.'''
        clump = self.clump
        if clump is None:
            return None

        return self._resolve(clump.frames, self.frame_index, 'frame')
