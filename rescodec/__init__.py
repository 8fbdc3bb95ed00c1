"""
# Rescodec: containers of game resources.

A container is a self-contained binary region with its own header and
directories: the directories are arrays of entries whose offsets locate the
sub-records, always relative to the first byte of the container, that can live
at any position inside a bigger file.

Two basic main operations are defined for a container and its sub-records:

 1. read(): decode the binary data at the current position of a cursor and
    build a high-level representation of that, following the directories.

 2. write(): encode the high-level representation at the current position,
    leaving the cursor after the last byte written.

Writing is a two passes process: the header and the directories are reserved
first, the sub-records are written learning their offsets, and at last the
header and the directories are backfilled.

The fixed-layout pieces (headers, entries, descriptors) are declared as
Records, in the same way of a Django model:

    class PointerEntry(Record):
        type_id     = fields.StructField('i')
        data_offset = fields.StructField('i')

A decoded container is either a SpriteContainer or a SceneNode, the root of a
graph of typed chunks.
"""
from .api import (
    ContainerFormat,
    sniff,
    load_container,
    save_container,
)
from .exceptions import (
    RescodecException,
    TruncatedInputError,
    MalformedContainerError,
    MagicException,
    UnsupportedFormatError,
    ReparentError,
    OversizeFieldError,
)
from .meta import Compliant, Endianess
from .streams import Cursor
