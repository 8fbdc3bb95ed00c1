'''
Entry points used by the outside world: recognize a container, load it into
a graph, save the graph back.

The codec never opens files: sources are bytes or binary file objects, and
the caller is in charge of where the bytes come from and go to.
'''
import logging
import struct
from enum import Enum

from .meta import Compliant
from .streams import Cursor
from .exceptions import TruncatedInputError, MalformedContainerError
from .sprites import SpriteContainer, SPRITE_CONTAINERS
from .renderware import SceneNode, NodeKind


logger = logging.getLogger(__name__)

SNIFF_SIZE = 12


class ContainerFormat(Enum):
    SPR4       = 'SPR4'
    SPR0       = 'SPR0'
    RENDERWARE = 'RW'


def _as_cursor(source):
    return source if isinstance(source, Cursor) else Cursor(source)


def sniff(source):
    '''Identify the format of the container at the current position of source.

    Sprite containers carry their ASCII tag at offset 8, RenderWare streams
    start with a known chunk id.'''
    cursor = _as_cursor(source)

    with cursor.saved():
        head = cursor.read(SNIFF_SIZE)

    if len(head) < SNIFF_SIZE:
        raise TruncatedInputError('0x%x bytes are not enough to recognize a container' % len(head))

    tag = head[8:12].rstrip(b'\x00').decode('latin-1')
    if tag in SPRITE_CONTAINERS:
        return ContainerFormat(tag)

    chunk_id, = struct.unpack('<I', head[:4])
    if NodeKind.from_chunk_id(chunk_id) is not NodeKind.OPAQUE:
        return ContainerFormat.RENDERWARE

    raise MalformedContainerError('unknown container tag %r' % head[8:12])


def load_container(source, compliant=Compliant.MAGIC):
    '''Decode the container found in source into a SpriteContainer or a SceneNode.

    Any failure is raised: a partially decoded graph is never returned.'''
    cursor = _as_cursor(source)
    container_format = sniff(cursor)
    logger.debug('loading %s container at 0x%x', container_format.name, cursor.tell())

    if container_format is ContainerFormat.RENDERWARE:
        return SceneNode.read(cursor)

    return SPRITE_CONTAINERS[container_format.value].read(cursor, compliant=compliant)


def save_container(graph, sink=None):
    '''Encode graph and return its bytes, writing them to sink too if given.

    The encoding happens in memory, so sink doesn't need to be seekable.'''
    if not isinstance(graph, (SpriteContainer, SceneNode)):
        raise TypeError('don\'t know how to save %r' % (graph,))

    cursor = Cursor()
    graph.write(cursor)
    data = cursor.getvalue()

    if sink is not None:
        sink.write(data)

    logger.debug('saved %r in 0x%x bytes', graph, len(data))

    return data
