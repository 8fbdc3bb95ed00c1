#!/usr/bin/env python3
'''
Extract the textures of a sprite container as PNG files, and optionally
each keyframe cropped out of its texture.

 $ sprextract.py sprites.spr outdir/
 $ sprextract.py --keyframes sprites.spr outdir/
'''
import sys
import os
import logging

from rescodec import load_container, RescodecException
from rescodec.sprites import SpriteContainer


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
logger.setLevel(level=logging.INFO if 'DEBUG' not in os.environ else logging.DEBUG)


def usage(progname):
    print(f'usage: {progname} [--keyframes] <sprite container> <output directory>')
    sys.exit(1)


def extract_textures(container, outdir):
    images = {}
    for idx, texture in enumerate(container.textures):
        try:
            image = texture.to_image()
        except (RescodecException, OSError) as e:
            logger.warning('skipping texture %d: %s', idx, e)
            continue

        path = os.path.join(outdir, f'texture_{idx:03d}.png')
        image.save(path)
        logger.info('saved %s (%dx%d)', path, image.width, image.height)

        images[idx] = image

    return images


def extract_keyframes(container, images, outdir):
    for idx, keyframe in enumerate(container.keyframes):
        image = images.get(keyframe.texture_index.value)
        if image is None:
            logger.warning('keyframe %d refers to a missing texture %d', idx, keyframe.texture_index.value)
            continue

        rect = keyframe.coordinates
        sprite = image.crop((rect.x1.value, rect.y1.value, rect.x2.value, rect.y2.value))

        path = os.path.join(outdir, f'keyframe_{idx:03d}.png')
        sprite.save(path)
        logger.info('saved %s', path)


if __name__ == '__main__':
    args = sys.argv[1:]

    with_keyframes = False
    if args and args[0] == '--keyframes':
        with_keyframes = True
        args = args[1:]

    if len(args) < 2:
        usage(sys.argv[0])

    path, outdir = args[:2]

    with open(path, 'rb') as f:
        container = load_container(f)

    if not isinstance(container, SpriteContainer):
        print(f'{path} is not a sprite container')
        sys.exit(1)

    os.makedirs(outdir, exist_ok=True)

    images = extract_textures(container, outdir)

    if with_keyframes:
        extract_keyframes(container, images, outdir)
