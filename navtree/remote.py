r"""HTTP access to published documentation bundles.

This module wraps the two network operations navtree needs: downloading
bundle scripts from a published documentation site and checking that the
pages referenced by the tree answer. Both share a ``requests`` session
configured with urllib3 retries for transient server errors.

Example
-------
>>> from navtree.remote import RemoteLinkChecker, RemoteSource
>>> source = RemoteSource("https://docs.example.invalid/html/")  # doctest: +SKIP
>>> source.read("navtreedata.js")[:12]  # doctest: +SKIP
'var NAVTREE '
>>> checker = RemoteLinkChecker("https://docs.example.invalid/html/")  # doctest: +SKIP
>>> checker("index.html")  # doctest: +SKIP
True
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

_USER_AGENT = "navtree/0.1"


class RemoteFetchError(RuntimeError):
    """Raised when a remote bundle file cannot be retrieved."""


def build_session() -> requests.Session:
    """Return a session that retries idempotent requests on 5xx responses."""
    session = requests.Session()
    retry = Retry(
        total=5,
        read=5,
        connect=3,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers["User-Agent"] = _USER_AGENT
    return session


def _normalize_base(base_url: str) -> str:
    return base_url.rstrip("/") + "/"


def _page_of(url: str) -> str:
    """Return ``url`` without its fragment."""
    return url.split("#", 1)[0]


class RemoteSource:
    """Read bundle scripts relative to a base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialise the source.

        Parameters
        ----------
        base_url : str
            Directory URL holding ``navtreedata.js``; a trailing slash is added
            when missing.
        session : requests.Session, optional
            Session to reuse. Defaults to :func:`build_session`.
        timeout : float, optional
            Per-request timeout in seconds. Defaults to ``30.0``.
        """
        self.base_url = _normalize_base(base_url)
        self._session = session or build_session()
        self.timeout = timeout

    def read(self, name: str) -> str | None:
        """Return the text of ``name`` or ``None`` when the server answers 404.

        Raises
        ------
        RemoteFetchError
            On connection failures or any other error status.
        """
        url = urljoin(self.base_url, name)
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            msg = f"Failed to fetch '{url}': {exc}"
            raise RemoteFetchError(msg) from exc

        if response.status_code == HTTPStatus.NOT_FOUND:
            logger.debug("No remote file at %s", url)
            return None
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            msg = f"Fetching '{url}' failed with status {response.status_code}."
            raise RemoteFetchError(msg)
        if "charset" not in response.headers.get("Content-Type", ""):
            response.encoding = "utf-8"
        return response.text

    def close(self) -> None:
        self._session.close()


class RemoteLinkChecker:
    """Check that tree URLs resolve to pages on a published site.

    Results are cached per page, so URLs that only differ by fragment cost a
    single ``HEAD`` request.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.base_url = _normalize_base(base_url)
        self._session = session or build_session()
        self.timeout = timeout
        self._cache: dict[str, bool] = {}

    def __call__(self, url: str) -> bool:
        """Return ``True`` when the page behind ``url`` answers below 400."""
        page = _page_of(url)
        if not page:
            return True
        if page in self._cache:
            return self._cache[page]
        target = urljoin(self.base_url, page)
        try:
            response = self._session.head(
                target, timeout=self.timeout, allow_redirects=True
            )
        except requests.RequestException as exc:
            logger.warning("Could not reach %s: %s", target, exc)
            reachable = False
        else:
            reachable = response.status_code < HTTPStatus.BAD_REQUEST
        self._cache[page] = reachable
        return reachable

    def close(self) -> None:
        self._session.close()


__all__ = [
    "RemoteFetchError",
    "RemoteLinkChecker",
    "RemoteSource",
    "build_session",
]
