import io
import logging
from contextlib import contextmanager

from .exceptions import TruncatedInputError


logger = logging.getLogger(__name__)


class Cursor(object):
    '''This is a simple wrapper around bytes/file objects to uniform their
    properties: a position that can be saved and restored, exact reads
    and zero-filled alignment.

    The cursor borrows the object passed in: it never closes it.'''

    def __init__(self, obj=b''):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self.obj = obj
        self.history = []

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, self.init_fileobj)

        init_method()

    def __repr__(self):
        return '<%s(position=0x%x, size=0x%x)>' % (self.__class__.__name__, self.tell(), self.size)

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    def init_bytearray(self):
        self.obj = io.BytesIO(bytes(self.obj))

    def init_memoryview(self):
        self.obj = io.BytesIO(self.obj.tobytes())

    def init_fileobj(self):
        for method in ('seek', 'tell', 'read'):
            if not hasattr(self.obj, method):
                raise ValueError('\'%s\' is the wrong kind of object to use as a cursor' % self.obj.__class__.__name__)

    def tell(self):
        return self.obj.tell()

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        if offset < 0:
            raise ValueError('negative offset %d' % offset)

        self.obj.seek(offset)

    def skip(self, count):
        self.seek(self.tell() + count)

    def relative(self, start):
        '''Position with respect to the start of the owning container.'''
        return self.tell() - start

    @property
    def size(self):
        position = self.obj.tell()
        end = self.obj.seek(0, io.SEEK_END)
        self.obj.seek(position)

        return end

    def remaining(self):
        return max(self.size - self.tell(), 0)

    def read(self, count=-1):
        return self.obj.read(count)

    def read_exact(self, count):
        offset = self.tell()
        data = self.obj.read(count)

        if len(data) != count:
            raise TruncatedInputError(
                'expected 0x%x bytes at offset 0x%x, got 0x%x' % (count, offset, len(data)))

        return data

    def write(self, data):
        return self.obj.write(data)

    def align(self, boundary, origin=0):
        '''Write zeros until the position (relative to origin) is a multiple of boundary.'''
        padding = -(self.tell() - origin) % boundary
        if padding:
            logger.debug('aligning to %d: 0x%x padding bytes at 0x%x', boundary, padding, self.tell())
            self.write(b'\x00' * padding)

        return padding

    def reserve(self, count):
        '''Zero-fill count bytes to be backfilled later and return where they start.'''
        offset = self.tell()
        self.write(b'\x00' * count)

        return offset

    def save(self):
        self.history.append(self.obj.tell())

    def restore(self):
        old_seek = self.history.pop()
        self.obj.seek(old_seek)

    @contextmanager
    def saved(self):
        self.save()
        try:
            yield self
        finally:
            self.restore()

    def getvalue(self):
        return self.obj.getvalue()
