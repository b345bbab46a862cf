class CodePackError(Exception):
    # base exception for all application-specific errors.
    pass

class ConfigError(CodePackError):
    # errors related to configuration.
    pass

class DiscoveryError(CodePackError):
    # errors during directory traversal.
    pass

class OutputError(CodePackError):
    # errors during output operations.
    pass

class IgnoreFileError(CodePackError):
    # an existing ignore file could not be read.
    # `partial` holds the rules collected before the failure.
    def __init__(self, message: str, path=None, partial=None):
        super().__init__(message)
        self.path = path
        self.partial = partial

class GlobPatternError(CodePackError, ValueError):
    # a glob pattern is malformed.
    pass
