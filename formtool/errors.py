class FormError(Exception):
    pass

class BadMagic(FormError):
    def __init__(self, magic):
        FormError.__init__(self, "Missing FORM magic (got %r)" % (magic,))
        self.magic = magic

class UnknownChunk(FormError):
    def __init__(self, tag):
        FormError.__init__(self, "Unknown chunk: %r" % (tag,))
        self.tag = tag

class TruncatedRead(FormError):
    pass

# Inferred blob sizes that come out zero or negative: the layout isn't
# the contiguous one the size-by-subtraction rule depends on.
class BadBlobRange(TruncatedRead):
    pass

# SOND and AUDO entries pair up by position, so their counts must agree.
class CountMismatch(FormError):
    pass

__all__ = ["FormError", "BadMagic", "UnknownChunk", "TruncatedRead", "BadBlobRange",
           "CountMismatch"]
