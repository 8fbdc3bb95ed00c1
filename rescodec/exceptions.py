class RescodecException(Exception):
    '''Base class to extend in order to throw exception in rescodec.

    It takes a single argument that represents the chain of the layer that
    caused the exception (innermost first), plus an optional message.
    '''

    def __init__(self, message=None, chain=None):
        self.chain = chain if chain is not None else []
        self.message = message
        super().__init__(message)

    def __str__(self):
        where = '.'.join(self.chain[::-1])
        if where and self.message:
            return '%s (at %s)' % (self.message, where)

        return self.message or where


class TruncatedInputError(RescodecException):
    '''Fewer bytes available than a fixed record requires.'''
    pass


class MalformedContainerError(RescodecException):
    '''Offsets or counts inconsistent with the stream bounds, or unknown tag.'''
    pass


class MagicException(MalformedContainerError):
    pass


class UnsupportedFormatError(RescodecException):
    '''The tag is known but not the flags/version combination.'''
    pass


class ReparentError(RescodecException):
    pass


class OversizeFieldError(RescodecException):
    '''A value doesn't fit into its declared storage.'''
    pass
