"""Building HTTP responses and reading the files they serve."""

from __future__ import annotations

import logging
import re

from webservpy.helpers import check_file_with_extension, file_is_executable
from webservpy.server_conf import ServerConf

logger = logging.getLogger(__name__)

CGI_LOCATION = "/cgi-bin"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class ForbiddenFile(Exception):
    """Raised when a CGI script is requested from outside ``cgi-bin/``."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Forbidden: {path}")
        self.path = path


def _status_number(status: str) -> int:
    match = _LEADING_INT.match(status)
    return int(match.group(1)) if match else 0


def find_cgi_extensions(conf: ServerConf, location_path: str) -> dict[str, str]:
    """Return the CGI extension map of the last location with this path."""
    extensions: dict[str, str] = {}
    for location in conf.locations:
        if location.path == location_path:
            extensions = dict(location.cgi_ext)
    return extensions


def read_html_file(path: str, conf: ServerConf) -> bytes:
    """Read the file to serve for ``path``; empty bytes when it cannot be read.

    Raises ForbiddenFile for a CGI script outside ``cgi-bin/``.
    """
    logger.debug("reading file %s", path)
    if not path:
        return b""
    cgi_map = find_cgi_extensions(conf, CGI_LOCATION)
    resolved = check_file_with_extension(path, cgi_map)
    try:
        with open(resolved, "rb") as served:
            content = served.read()
    except OSError:
        return b""
    dot = resolved.rfind(".")
    if dot != -1:
        extension = resolved[dot:]
        kind = file_is_executable(resolved, extension, cgi_map)
        if kind == -1:
            raise ForbiddenFile(resolved)
        if kind == 1:
            logger.debug("CGI script requested: %s (%s)", resolved, extension)
    return content


def create_http_response(
    status_code: str, status_message: str, content_type: str, body: str | bytes
) -> bytes:
    """Build a complete response that closes the connection."""
    payload = body.encode("utf-8") if isinstance(body, str) else body
    head = (
        f"HTTP/1.1 {status_code} {status_message}\r\n"
        f"Content-Type: {content_type}\r\n"
        f"Content-Length: {len(payload)}\r\n"
        "Connection: close\r\n"
        "\r\n"
    )
    return head.encode("utf-8") + payload


def create_error_response(status: str, conf: ServerConf, root_path: str) -> bytes:
    """Build an error response, preferring the server's own error page."""
    code_text, sep, message = status.partition(" ")
    if not sep:
        message = status
    code = _status_number(status)
    logger.debug("error code %d", code)
    page = conf.error_pages.get(code)
    if page is not None:
        try:
            content = read_html_file(root_path + page, conf)
        except ForbiddenFile:
            content = b""
        if content:
            return create_http_response(code_text, message, "text/html", content)
    default = conf.default_error_pages.get(code, "")
    return create_http_response(code_text, message, "text/html", default)