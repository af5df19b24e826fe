"""
npm registry client infrastructure for srcfetch.

Wraps the registry's packument endpoint (``GET /<name>``) behind a
small class so the resolver can be tested without the network.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from ..exit_codes import ResolutionError

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"


class RegistryClient:
    """
    Client for an npm-compatible registry.

    Example:
        client = RegistryClient()
        packument = client.get_packument("@babel/core")
        latest = packument["dist-tags"]["latest"]
    """

    def __init__(
        self,
        base_url: str = DEFAULT_REGISTRY_URL,
        timeout: int = 30,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize RegistryClient.

        Args:
            base_url: Registry root URL
            timeout: Request timeout in seconds
            session: requests session to reuse (creates new if None)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault('Accept', 'application/json')

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'RegistryClient':
        registry = config.get('registry', {})
        return cls(
            base_url=registry.get('url', DEFAULT_REGISTRY_URL),
            timeout=registry.get('timeout_seconds', 30),
        )

    def packument_url(self, name: str) -> str:
        """URL of a package document; scoped names keep their '@'."""
        return f"{self.base_url}/{quote(name, safe='@')}"

    def get_packument(self, name: str) -> Dict[str, Any]:
        """
        Fetch the full package document.

        Raises:
            ResolutionError: package missing, registry unreachable or
                answering with something other than a JSON object
        """
        url = self.packument_url(name)
        logger.debug(f"GET {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise ResolutionError(f"Registry request for {name} failed: {e}", package=name) from e

        if response.status_code == 404:
            raise ResolutionError(f"Package not found on registry: {name}", package=name)
        if response.status_code != 200:
            raise ResolutionError(
                f"Registry returned status {response.status_code} for {name}", package=name
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ResolutionError(f"Registry returned invalid JSON for {name}", package=name) from e

        if not isinstance(data, dict):
            raise ResolutionError(f"Unexpected registry response for {name}", package=name)
        return data
