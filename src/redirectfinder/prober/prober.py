"""Status prober.

Probes a URL once, follows its redirect chain and reports the HTTP status
together with the URL the chain ended on. Any HTTP response counts as
success; only transport failures leave the status empty. Probes are never
retried.
"""

import logging
from typing import Optional

from redirectfinder.core.constants import DEFAULTS
from redirectfinder.core.exceptions import TransportError
from redirectfinder.core.models import ProbeResult
from redirectfinder.classifier.normalizer import URLNormalizer
from redirectfinder.prober.transport import HttpTransport


logger = logging.getLogger(__name__)


class StatusProber:
    """Probe URLs for their HTTP status and redirect target.

    Example:
        >>> async with HttpxTransport() as transport:
        ...     prober = StatusProber(transport)
        ...     result = await prober.probe("https://example.com/old")
    """

    def __init__(
        self,
        transport: HttpTransport,
        *,
        timeout: float = DEFAULTS["timeout"],
        max_redirects: int = DEFAULTS["max_redirects"],
        normalizer: Optional[URLNormalizer] = None,
    ) -> None:
        """Initialize prober.

        Args:
            transport: HTTP transport performing the requests
            timeout: Per-probe timeout in seconds
            max_redirects: Maximum redirects followed per probe
            normalizer: URLNormalizer for redirect comparison
        """
        self.transport = transport
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.normalizer = normalizer or URLNormalizer()

    async def probe(self, url: str) -> ProbeResult:
        """Probe a single URL.

        Args:
            url: URL to probe

        Returns:
            ProbeResult; status is None if no HTTP response was received
        """
        try:
            response = await self.transport.fetch(
                url,
                timeout=self.timeout,
                max_redirects=self.max_redirects,
            )
        except TransportError as e:
            if e.status is None:
                logger.warning(f"No response for {url}: {e}")
                return ProbeResult(url=url)

            logger.debug(f"Using partial response for {url}: {e.status}")
            return ProbeResult(
                url=url,
                status=e.status,
                final_url=self._final_url(url, e.url),
            )

        return ProbeResult(
            url=url,
            status=response.status,
            final_url=self._final_url(url, response.effective_url),
        )

    def _final_url(self, url: str, effective_url: Optional[str]) -> Optional[str]:
        """Return the effective URL only if redirects changed the location."""
        if not effective_url or self.normalizer.same_location(url, effective_url):
            return None
        return effective_url
