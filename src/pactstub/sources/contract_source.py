"""
PactStub Contract Sources

Fetch contract text from a literal string, a local file, or a pact broker.
Every source raises FetchError on failure; none of them parse the text.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import requests

from ..common.errors import FetchError


logger = logging.getLogger("pactstub.sources")


class ContractSource:
    """Base class for contract text providers."""

    def fetch(self, locator: str) -> str:
        """
        Retrieve contract text.

        Args:
            locator: Source-specific locator (text, path or URL)

        Returns:
            Contract text

        Raises:
            FetchError: If the text cannot be retrieved
        """
        raise NotImplementedError


class TextSource(ContractSource):
    """Returns the locator itself as contract text."""

    def fetch(self, locator: str) -> str:
        if locator is None:
            raise FetchError("No contract text supplied")
        return locator


class FileSource(ContractSource):
    """Reads contract text from a local UTF-8 file."""

    def fetch(self, locator: Union[str, Path]) -> str:
        path = Path(locator)
        if not path.is_file():
            raise FetchError(f"Pact file not found: {path}", locator=str(locator))

        logger.debug(f"Reading pact file {path}")
        try:
            return path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise FetchError(f"Failed to read pact file {path}: {e}", locator=str(locator)) from e


class BrokerSource(ContractSource):
    """
    Downloads contract text from a pact broker.

    Example:
        source = BrokerSource(timeout=10, token='abc')
        text = source.fetch('https://broker.example.com/pacts/provider/P/consumer/C/latest')
    """

    ACCEPT = 'application/hal+json, application/json'

    def __init__(
        self,
        timeout: float = 30.0,
        username: Optional[str] = None,
        password: Optional[str] = None,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize broker source.

        Args:
            timeout: Request timeout in seconds
            username: Basic auth username
            password: Basic auth password
            token: Bearer token (takes precedence over basic auth)
            session: Optional requests session to reuse
        """
        self.timeout = timeout
        self.username = username
        self.password = password
        self.token = token
        self.session = session or requests.Session()

    def _auth(self) -> Optional[Tuple[str, str]]:
        if self.token or not self.username:
            return None
        return (self.username, self.password or '')

    def fetch(self, locator: str) -> str:
        headers = {'Accept': self.ACCEPT}
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"

        logger.info(f"Fetching pact from broker {locator}")
        try:
            response = self.session.get(
                locator,
                headers=headers,
                auth=self._auth(),
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Failed to reach pact broker at {locator}: {e}", locator=locator) from e

        if not response.ok:
            raise FetchError(
                f"Pact broker returned HTTP {response.status_code} for {locator}",
                locator=locator
            )

        return response.text


def resolve_source(locator: str, **broker_options) -> ContractSource:
    """
    Choose a source from the shape of the locator.

    - http(s):// URLs are fetched from a broker
    - text starting with "{" or "[" is treated as literal contract text
    - anything else is treated as a file path

    Args:
        locator: URL, JSON text or file path
        **broker_options: Keyword arguments for BrokerSource

    Returns:
        ContractSource able to fetch the locator
    """
    stripped = locator.lstrip()
    if stripped.startswith(('http://', 'https://')):
        return BrokerSource(**broker_options)
    if stripped.startswith(('{', '[')):
        return TextSource()
    return FileSource()

