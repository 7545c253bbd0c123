"""Delivery of redirect proposals to the site API."""

import logging
from collections.abc import Sequence
from typing import Any, Optional

import httpx

from redirectfinder.classifier.normalizer import URLNormalizer
from redirectfinder.core.constants import DEFAULTS
from redirectfinder.core.exceptions import DeliveryError
from redirectfinder.core.models import DeliveryReport, RedirectRecord


logger = logging.getLogger(__name__)


class ResultsSender:
    """POST redirect records to the remote redirect API.

    The API takes site-relative paths, so absolute URLs are reduced to
    their path before sending.
    """

    def __init__(
        self,
        api_url: Optional[str],
        api_key: Optional[str],
        *,
        timeout: float = DEFAULTS["delivery_timeout"],
        normalizer: Optional[URLNormalizer] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize sender.

        Args:
            api_url: Endpoint receiving the redirects
            api_key: Bearer token for the endpoint
            timeout: Request timeout in seconds
            normalizer: URL normalizer (created if not provided)
            http_transport: Custom httpx transport (used in tests)
        """
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self.normalizer = normalizer or URLNormalizer()
        self._http_transport = http_transport

    def build_payload(self, records: Sequence[RedirectRecord]) -> list[dict[str, Any]]:
        """Convert records to the request body."""
        # "precent" is the field name the receiving API expects
        return [
            {
                "from": self.normalizer.to_relative(record.source),
                "to": self.normalizer.to_relative(record.target),
                "precent": record.percent,
            }
            for record in records
        ]

    async def send(self, records: Sequence[RedirectRecord]) -> DeliveryReport:
        """Send records to the API.

        Args:
            records: Redirects to deliver

        Returns:
            DeliveryReport with the counts reported by the API

        Raises:
            DeliveryError: If credentials are missing, there is nothing
                to send, or the request fails
        """
        if not self.api_url or not self.api_url.strip():
            raise DeliveryError("API_URL is not set")
        if not self.api_key or not self.api_key.strip():
            raise DeliveryError("API_KEY is not set")

        payload = self.build_payload(records)
        if not payload:
            raise DeliveryError("No redirects to send")

        logger.info(f"Sending {len(payload)} redirects to {self.api_url}")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._http_transport,
            ) as client:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers={
                        "Content-Type": "application/json",
                        "Authorization": f"Bearer {self.api_key}",
                    },
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise DeliveryError(
                f"API responded with {status}: {_error_message(e.response)}"
            ) from e
        except httpx.HTTPError as e:
            raise DeliveryError(f"Failed to reach API: {e}") from e

        report = _parse_report(response, len(payload))
        logger.info(
            f"Delivery finished. Created: {report.created}, "
            f"updated: {report.updated}, total: {report.total}"
        )
        return report


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.reason_phrase or response.text
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return response.reason_phrase or str(data)


def _parse_report(response: httpx.Response, sent: int) -> DeliveryReport:
    try:
        data = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    return DeliveryReport(
        created=int(data.get("created") or 0),
        updated=int(data.get("updated") or 0),
        total=int(data.get("total") or sent),
    )
