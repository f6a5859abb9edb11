"""Trusty package report client.

Fetches the raw JSON report for a package from the Trusty API. Exactly one
request per call; failures are surfaced as ReportLookupError without retry.
"""

from __future__ import annotations

import logging

import httpx

from trusty.exceptions import ReportLookupError
from trusty.models.config import DEFAULT_REPORT_URL, ReportConfig

logger = logging.getLogger(__name__)


class ReportClient:
    """Sync httpx client for ``GET /v1/report``.

    Usage::

        with ReportClient() as client:
            raw = client.fetch("left-pad", "npm")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_REPORT_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            timeout=timeout,
            headers={"accept": "application/json"},
            transport=transport,
        )

    def fetch(self, package_name: str, ecosystem: str) -> str:
        """Return the report body for one package.

        Args:
            package_name: Package name as published (e.g. "left-pad").
            ecosystem: Package ecosystem (e.g. "npm", "pypi"); sent as
                ``package_type``.

        Raises:
            ReportLookupError: On transport failure, timeout, malformed URL or
                non-2xx status.
        """
        url = f"{self._base_url}/v1/report"
        params = {"package_name": package_name, "package_type": ecosystem}
        logger.debug("Fetching report for %s/%s", ecosystem, package_name)
        try:
            response = self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ReportLookupError(
                f"Report request for {ecosystem}/{package_name} failed: HTTP "
                f"{exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ReportLookupError(
                f"Report request for {ecosystem}/{package_name} failed: "
                f"{type(exc).__name__}: {exc}"
            ) from exc
        return response.text

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> ReportClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def create_report_client(config: ReportConfig) -> ReportClient:
    return ReportClient(config.base_url, timeout=config.timeout)
