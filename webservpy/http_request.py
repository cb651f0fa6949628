"""Parsing of raw HTTP request text."""

from __future__ import annotations

from dataclasses import dataclass, field

from webservpy.helpers import create_and_move, trim_line, trim_with_characters

FORM_URLENCODED = "application/x-www-form-urlencoded"

_BODY_TRIM = "\",\t\n "


def _getlines(text: str) -> list[str]:
    """Split into lines the way a line reader does: no empty trailing line."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


@dataclass
class HttpRequest:
    """A parsed HTTP request: request line, headers, body and query."""

    method: str = ""
    path: str = ""
    version: str = ""
    host_name: str = ""
    request_file: str = ""
    content_type: str = ""
    content_length: int = 0
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    body_fields: dict[str, str] = field(default_factory=dict)
    query_params: dict[str, str] = field(default_factory=dict)

    def parse(self, request: str) -> HttpRequest:
        """Fill this request from raw request text and return it.

        Raises ValueError when the text is malformed.
        """
        self.method, rest = create_and_move(request, " ")
        first_line = request.split("\n", 1)[0]
        if first_line.count(" ") == 2:
            target, rest = create_and_move(rest, " ")
            self.set_path(target)
        self.version, rest = create_and_move(rest, "\n")
        self.headers = self.parse_headers(rest)

        start = rest.find("{")
        if start == -1:
            if not rest:
                raise ValueError("Request has no header section")
            self.body = ""
            return self
        end = rest.rfind("}")
        self.body = rest[start:end + 1] if end >= start else rest[start:]
        self.body_fields = self.parse_body()
        return self

    def parse_headers(self, text: str) -> dict[str, str]:
        """Read ``Key: value`` lines up to the first blank or non-header line.

        Sets the host name and content type; a form-encoded body is read
        into the query parameters.
        """
        lines = iter(_getlines(text))
        headers: dict[str, str] = {}
        for line in lines:
            if not line or "{" in line or "}" in line:
                break
            key, sep, value = line.partition(":")
            if not sep:
                break
            key, value = trim_line(key), trim_line(value)
            if not key or not value:
                raise ValueError("Key or value is empty")
            headers[key] = value
        self.set_host_name(headers.get("Host", ""))
        self.content_type = headers.get("Content-Type", "")
        if self.content_type == FORM_URLENCODED:
            for line in lines:
                if "=" in line:
                    self.parse_query(line)
        return headers

    def parse_body(self) -> dict[str, str]:
        """Extract ``"key": value`` pairs from a JSON-like body."""
        fields: dict[str, str] = {}
        body = self.body
        if not body:
            return fields
        pos = body.find('"')
        length = len(body)
        i = 0
        while i < length:
            if body[i] == ":":
                if pos == -1:
                    raise ValueError("Malformed body: no quoted key")
                segment = body[pos:i] if i >= pos else body[pos:]
                if segment.count('"') % 2 == 0:
                    key = trim_with_characters(segment, _BODY_TRIM)
                    pos = i + 1
                    while i < length and body[i] not in ",\0":
                        i += 1
                    fields[key] = trim_with_characters(body[pos:i], _BODY_TRIM)
                    pos = i + 1
            i += 1
        return fields

    def parse_query(self, query: str) -> None:
        """Add every ``key=value`` pair of an ``&``-separated query."""
        for pair in query.split("&"):
            key, sep, value = pair.partition("=")
            if sep:
                self.query_params[key] = value

    def set_path(self, path: str) -> None:
        """Split a request target into path, requested file and query."""
        target = path
        question = target.find("?")
        if question != -1:
            self.parse_query(target[question + 1:])
            target = target[:question]
        if target.count("/") == 1:
            self.path = trim_line(target)
            return
        first = target.find("/")
        if first == -1:
            raise ValueError(f"Invalid request path: {path}")
        last = target.rfind("/")
        self.path = trim_line(target[first:first + last])
        self.request_file = trim_line(target[last + 1:])

    def set_host_name(self, host_name: str) -> None:
        """Store the host name without any port suffix."""
        self.host_name = host_name.split(":", 1)[0]