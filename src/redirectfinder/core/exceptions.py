from typing import Optional


class RedirectFinderError(Exception):
    pass

class ConfigError(RedirectFinderError):
    pass

class SourceError(RedirectFinderError):
    """Input file could not be read or has the wrong shape."""
    pass

class ProbeError(RedirectFinderError):
    pass

class TransportError(ProbeError):
    """No complete HTTP response was received.

    Carries the status and URL of a partial response when the transport
    managed to read one before failing.
    """

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.url = url

class ClassificationError(RedirectFinderError):
    pass

class CodeDecodeError(ClassificationError):
    """URL contains malformed percent-encoding."""
    pass

class PipelineError(RedirectFinderError):
    pass

class StorageError(RedirectFinderError):
    pass

class ExportError(RedirectFinderError):
    pass

class DeliveryError(RedirectFinderError):
    """Sending results to the remote API failed."""
    pass
