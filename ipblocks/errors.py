class BlocksError(Exception):
    pass

class EncodingError(BlocksError):
    pass

class ParseError(BlocksError):
    pass

class HashVerificationError(BlocksError):
    pass

class UnsupportedAlgorithmError(BlocksError):
    pass

class NotFoundError(BlocksError):
    pass

class BackendUnavailableError(BlocksError):
    """The remote backend could not be reached. The transport error is chained as __cause__."""
    pass

class ConcurrentUpdateError(BlocksError):
    pass

class ConfigError(BlocksError):
    pass
