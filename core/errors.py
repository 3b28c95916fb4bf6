"""
Error taxonomy for the scanner.

Configuration errors are raised before any network activity. ScanAborted
signals that a worker died and the result set would have a gap.
"""


class ScanError(Exception):
    """Base for every error the scanner raises on purpose."""

    def __init__(self, message: str):
        if not message:
            raise ValueError("error message cannot be empty")
        super().__init__(message)
        self.message = message


class ConfigurationError(ScanError):
    pass


class InvalidRange(ConfigurationError):
    pass


class InvalidThreadCount(ConfigurationError):
    pass


class InvalidTimeout(ConfigurationError):
    pass


class InvalidHost(ConfigurationError):
    pass


class InvalidArgument(ConfigurationError):
    pass


class ScanAborted(ScanError):
    pass
