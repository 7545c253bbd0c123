"""HTTP status probing.

- HttpTransport: Protocol for fetching a URL and following redirects
- HttpxTransport: httpx-based transport
- StatusProber: Probe a URL and report status and redirect target
"""

from redirectfinder.prober.transport import HttpTransport, HttpxTransport
from redirectfinder.prober.prober import StatusProber

__all__ = [
    "HttpTransport",
    "HttpxTransport",
    "StatusProber",
]
