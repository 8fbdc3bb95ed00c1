#!/usr/bin/env python3
'''
Dump the structure of a resource container (SPR4, SPR0 or RenderWare scene).

 $ resdump.py sprites.spr
 $ DEBUG=1 resdump.py model.rmd
'''
import sys
import os
import logging

from rescodec import load_container, Compliant
from rescodec.renderware import SceneNode, RwNode, NodeKind


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
logging.getLogger().setLevel(level=logging.INFO if 'DEBUG' not in os.environ else logging.DEBUG)


def usage(progname):
    print(f'usage: {progname} [--relaxed] <container file>')
    sys.exit(1)


def dump_sprites(container):
    print(f'''{container.__class__.__name__}:
  User id:                           0x{container.user_id:04x}
  Textures:                          {container.texture_count}
  Keyframes:                         {container.keyframe_count}''')

    print('Textures:')
    for idx, texture in enumerate(container.textures):
        header = texture.header
        print(f'  [{idx: >3d}] type={texture.type_id} size=0x{texture.size:x} {header if header else "-"}')

    print('Keyframes:')
    for idx, keyframe in enumerate(container.keyframes):
        print(f'  [{idx: >3d}] {keyframe}')


def describe(node):
    if not isinstance(node, RwNode):
        return repr(node)

    description = f'{node.kind.name:<20} id=0x{node.chunk_id:02x} version=0x{node.version:08x}'

    if node.kind == NodeKind.STRING:
        description += f' {node.value!r}'
    elif node.kind == NodeKind.GEOMETRY:
        description += f' triangles={node.triangle_count} vertices={node.vertex_count} flags={node.flags}'
    elif node.kind == NodeKind.ATOMIC:
        description += f' frame={node.frame_index} geometry={node.geometry_index}'
    elif node.kind == NodeKind.FRAME_LIST:
        description += f' frames={len(node.frames)}'
    elif hasattr(node, 'data'):
        description += f' data=0x{len(node.data):x}'

    return description


def dump_scene(scene):
    for depth, node in scene.walk():
        print(f'{"  " * depth}{describe(node)}')


if __name__ == '__main__':
    args = sys.argv[1:]

    compliant = Compliant.MAGIC
    if args and args[0] == '--relaxed':
        compliant = Compliant.NONE
        args = args[1:]

    if len(args) < 1:
        usage(sys.argv[0])

    with open(args[0], 'rb') as f:
        graph = load_container(f, compliant=compliant)

    if isinstance(graph, SceneNode):
        dump_scene(graph)
    else:
        dump_sprites(graph)
