'''
# RenderWare binary streams

Scenes are stored as a sequence of top level chunks (texture dictionary,
clumps, ...): each chunk nests other chunks, building the resource graph

  SceneNode
   |- TextureDictionaryNode
   |   '- TextureNativeNode ...
   '- ClumpNode
       |- StructNode
       |- FrameListNode
       |- GeometryListNode
       |   '- GeometryNode ...
       '- AtomicNode ...

The size of each chunk is only known after its children are written, so the
header is reserved and backfilled like the directories of the sprite containers.
'''
import logging

from ..graph import ResourceNode
from ..exceptions import UnsupportedFormatError
from .enum import NodeKind, GeometryFlags, DEFAULT_VERSION
from .nodes import (
    ChunkHeader,
    HEADER_SIZE,
    NODE_CLASSES,
    register_node,
    read_node,
    RwNode,
    DataNode,
    StructNode,
    OpaqueNode,
    StringNode,
    ContainerNode,
    ExtensionNode,
    TextureNode,
    MaterialNode,
    MaterialListNode,
    TextureNativeNode,
    TextureDictionaryNode,
    Frame,
    FrameListNode,
    GeometryListNode,
    GeometryNode,
    ClumpNode,
    AtomicNode,
)


logger = logging.getLogger(__name__)


def is_stamped_version(version):
    '''Library stamped versions keep the build number in the high half, the
    pre-3.1 streams have only a plain version number.'''
    return (version >> 16) != 0


class SceneNode(ResourceNode):
    '''Root of the graph: it has no header of its own.'''

    kind = NodeKind.SCENE

    def __repr__(self):
        return '<%s(children=%d)>' % (self.__class__.__name__, len(self.children))

    @property
    def clumps(self):
        return self.find_children(NodeKind.CLUMP)

    @property
    def texture_dictionary(self):
        return self.find_child(NodeKind.TEXTURE_DICTIONARY)

    @property
    def has_texture_dictionary(self):
        return self.texture_dictionary is not None

    @classmethod
    def read(cls, cursor, end=None):
        end = cursor.size if end is None else end
        logger.debug('reading scene at 0x%x', cursor.tell())

        scene = cls()
        index = 0
        while cursor.tell() < end:
            node = read_node(cursor, end)
            if not is_stamped_version(node.version):
                raise UnsupportedFormatError(
                    'chunk %d has unstamped version 0x%x' % (index, node.version), chain=[str(index)])

            scene.add_child(node)
            index += 1

        return scene

    def write(self, cursor):
        start = cursor.tell()
        for child in self.children:
            child.write(cursor)

        return cursor.tell() - start


__all__ = [
    'SceneNode',
    'NodeKind',
    'GeometryFlags',
    'DEFAULT_VERSION',
    'ChunkHeader',
    'HEADER_SIZE',
    'NODE_CLASSES',
    'register_node',
    'read_node',
    'RwNode',
    'DataNode',
    'StructNode',
    'OpaqueNode',
    'StringNode',
    'ContainerNode',
    'ExtensionNode',
    'TextureNode',
    'MaterialNode',
    'MaterialListNode',
    'TextureNativeNode',
    'TextureDictionaryNode',
    'Frame',
    'FrameListNode',
    'GeometryListNode',
    'GeometryNode',
    'ClumpNode',
    'AtomicNode',
]
