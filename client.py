"""HTTP transport for webfs: fetches file contents and directory listings."""

import logging
from dataclasses import dataclass
from urllib.parse import quote, urljoin, urlsplit

import requests
import urllib3

from errors import InvalidPathError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 1000  # ms
DEFAULT_READ_TIMEOUT = 0  # ms, 0 waits forever
DEFAULT_PROXY_PORT = 80
CHUNK_SIZE = 8192


@dataclass
class ClientConfig:
    """Settings for one WebFileClient.

    server is the base URL every request path is resolved against. proxy is
    "host" or "host:port". Timeouts are in milliseconds. insecure skips
    certificate validation for https servers.
    """
    server: str
    proxy: str | None = None
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    read_timeout: int = DEFAULT_READ_TIMEOUT
    insecure: bool = False

    def __post_init__(self):
        scheme = urlsplit(self.server).scheme
        if scheme not in ("http", "https"):
            raise InvalidPathError(f"Not an http(s) base URL: {self.server!r}")
        # Request paths are relative to the base, never to its parent
        if not self.server.endswith("/"):
            self.server += "/"
        self.connect_timeout = max(0, int(self.connect_timeout))
        self.read_timeout = max(0, int(self.read_timeout))

    @property
    def proxies(self) -> dict[str, str]:
        if not self.proxy:
            return {}
        host, _, port = self.proxy.partition(":")
        url = f"http://{host}:{port or DEFAULT_PROXY_PORT}"
        return {"http": url, "https": url}

    @property
    def timeout(self) -> tuple[float, float | None]:
        """(connect, read) in seconds, as requests expects it."""
        read = self.read_timeout / 1000 if self.read_timeout else None
        return self.connect_timeout / 1000, read


class RemoteStream:
    """Readable body of a successful response. Closing it releases the connection."""

    def __init__(self, response: requests.Response):
        self._response = response

    @property
    def url(self) -> str:
        return self._response.url

    def read(self, size: int = -1) -> bytes:
        try:
            if size is None or size < 0:
                return b"".join(self._response.iter_content(CHUNK_SIZE))
            return self._response.raw.read(size, decode_content=True)
        except (requests.RequestException, urllib3.exceptions.HTTPError, OSError) as e:
            raise TransportError(None, f"Error reading {self.url}: {e}") from e

    def __iter__(self):
        """Iterate over lines split on b"\\n"; a preceding b"\\r" is kept."""
        pending = b""
        try:
            for chunk in self._response.iter_content(CHUNK_SIZE):
                pending += chunk
                *lines, pending = pending.split(b"\n")
                yield from lines
        except (requests.RequestException, urllib3.exceptions.HTTPError, OSError) as e:
            raise TransportError(None, f"Error reading {self.url}: {e}") from e
        if pending:
            yield pending

    def close(self):
        self._response.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class WebFileClient:
    """Issues GET requests below one base URL."""

    def __init__(self, config: ClientConfig):
        self.config = config
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "webfs/1.0"})
        self.session.proxies.update(config.proxies)
        self.session.verify = not config.insecure
        # Proxy settings come from the config only
        self.session.trust_env = False
        if config.insecure:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    @classmethod
    def for_server(cls, server: str, **options):
        return cls(ClientConfig(server, **options))

    def url(self, path: str) -> str:
        return urljoin(self.config.server, quote(path, safe="/"))

    def fetch(self, path: str) -> RemoteStream:
        """GET path (relative to the base URL) and return its body as a stream."""
        url = self.url(path)
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url, stream=True, timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.debug("GET %s failed: %s", url, e)
            raise TransportError(None, f"Cannot fetch {url}: {e}") from e

        if response.status_code != requests.codes.ok:
            response.close()
            logger.debug("GET %s answered %s %s", url, response.status_code, response.reason)
            raise TransportError(response.status_code, response.reason or "")
        return RemoteStream(response)

    def close(self):
        self.session.close()
