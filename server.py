"""Read-only HTTP server publishing a Backend in the webfs listing format."""

import logging
from datetime import timezone
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import unquote

from backend import Backend, BackendError
from errors import NotFoundError
from listing import DIRECTORY_SIZE, SELF

logger = logging.getLogger(__name__)

LISTING_TYPE = "text/plain; charset=utf-8"
ALLOWED = "OPTIONS, GET, HEAD"


def _parse_path(raw: str) -> list[str]:
    """Decode a URL path and split it into segments, dropping empty and "." ones."""
    decoded = unquote(raw)
    return [p for p in decoded.split("/") if p and p != "."]


def format_record(name: str, info) -> str:
    """Render one listing line for a resource."""
    if info.modified is None:
        modified = ""
    else:
        modified = info.modified.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    size = DIRECTORY_SIZE if info.is_dir else str(info.size)
    return f"{name}\t{modified}\t{size}"


def render_listing(backend: Backend, path: list[str]) -> bytes:
    """Render the listing of a directory: its self record, then its children."""
    lines = [format_record(SELF, backend.info(path))]
    for name in backend.list(path):
        if "\t" in name or "\n" in name or "\r" in name:
            logger.debug("Skipping unlistable name %r", name)
            continue
        try:
            child = backend.info(path + [name])
        except BackendError:
            continue
        lines.append(format_record(name, child))
    return ("\n".join(lines) + "\n").encode("utf-8")


class ListingHandler(BaseHTTPRequestHandler):
    """HTTP request handler: listings for directories, bytes for files."""

    backend: Backend

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)

    def _send(self, status: int, body: bytes, content_type: str, include_body: bool = True):
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if include_body:
            self.wfile.write(body)

    def _try(self, fn, include_body: bool = True):
        """Call fn(), returning its result. On backend errors, send an error response and return None."""
        try:
            return fn()
        except NotFoundError:
            self._send(404, b"Not Found", "text/plain", include_body)
            return None
        except BackendError as e:
            self._send(500, str(e).encode(), "text/plain", include_body)
            return None

    def do_OPTIONS(self):
        self.send_response(200)
        self.send_header("Allow", ALLOWED)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def do_GET(self):
        self._handle_get(include_body=True)

    def do_HEAD(self):
        self._handle_get(include_body=False)

    def _handle_get(self, include_body: bool):
        path = _parse_path(self.path.split("?", 1)[0])

        info = self._try(lambda: self.backend.info(path), include_body)
        if info is None:
            return

        if info.is_dir:
            body = self._try(lambda: render_listing(self.backend, path), include_body)
            if body is None:
                return
            return self._send(200, body, LISTING_TYPE, include_body)

        data = self._try(lambda: self.backend.get(path), include_body)
        if data is None:
            return
        return self._send(200, data, "application/octet-stream", include_body)

    def _method_not_allowed(self):
        self.send_response(405)
        self.send_header("Allow", ALLOWED)
        self.send_header("Content-Length", "0")
        self.end_headers()

    do_PUT = lambda self: self._method_not_allowed()
    do_DELETE = lambda self: self._method_not_allowed()
    do_POST = lambda self: self._method_not_allowed()
    do_PATCH = lambda self: self._method_not_allowed()
    do_MKCOL = lambda self: self._method_not_allowed()
    do_MOVE = lambda self: self._method_not_allowed()
    do_COPY = lambda self: self._method_not_allowed()
    do_PROPFIND = lambda self: self._method_not_allowed()
    do_PROPPATCH = lambda self: self._method_not_allowed()


def make_server(backend: Backend, host: str = "localhost", port: int = 8080) -> HTTPServer:
    """Create a listing server for the given backend."""
    handler_class = type("Handler", (ListingHandler,), {"backend": backend})
    return HTTPServer((host, port), handler_class)
