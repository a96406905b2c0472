class LinkPackError(Exception):
    pass

class ConfigError(LinkPackError):
    pass

class InputEmptyError(LinkPackError):
    """No usable lines or URLs were found."""
    pass

class InvalidUrlError(LinkPackError):
    """A single URL failed canonicalization."""

    def __init__(self, raw: str, reason: str):
        super().__init__(reason)
        self.raw = raw
        self.reason = reason

class UnrecognizedFormatError(LinkPackError):
    """Import payload matched no detector."""
    pass

class SessionFormatError(UnrecognizedFormatError):
    """Session file kind/version did not match the contract."""
    pass

class DependencyUnavailableError(LinkPackError):
    """Optional capability (QR rendering) is missing or failed."""
    pass

class ArchiveError(LinkPackError):
    """Archive assembly aborted. No archive is produced."""
    pass

class StorageError(LinkPackError):
    """Writing or reading an output file failed."""
    pass
