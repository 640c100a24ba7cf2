"""
HTTP client shared by the station observation readers.
"""

import logging
from typing import Any, Dict, Optional

import requests  # type: ignore
import urllib3  # type: ignore

USER_AGENT = "station-wind/0.1"


class APIClient:
    """Session-backed JSON client bound to one base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        verify_ssl: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize API client.

        Args:
            base_url: Base URL of the station network's endpoint
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            logger: Logger instance
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.logger = logger or logging.getLogger(__name__)

        if not verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        # Single attempt per request; callers pace and fall back themselves
        self.session = requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _make_request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Send a request and raise on HTTP error status.

        Raises:
            requests.exceptions.RequestException: On connection, timeout or
                HTTP status failure
        """
        url = self.url_for(endpoint)
        kwargs.setdefault("verify", self.verify_ssl)
        self.logger.debug(f"{method} {url} {kwargs.get('params') or ''}".rstrip())

        try:
            response = self.session.request(method=method, url=url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            self.logger.error(f"{method} {url} failed: {e}")
            raise

        return response

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET an endpoint and decode its JSON body (ValueError if it is not JSON)."""
        return self._make_request("GET", endpoint, params=params).json()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "APIClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
