"""Tokenising of configuration text and building of server configurations."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from webservpy.helpers import ConfigError, trim_line
from webservpy.location import LocationConf
from webservpy.server_conf import ServerConf

CONF_KEYS: tuple[str, ...] = (
    "autoindex",
    "methods",
    "try_files",
    "upload_dir",
    "return",
    "cgi_pass",
    "cgi_ext",
    "root",
    "index",
    "listen",
    "server_name",
    "client_max_body_size",
    "access_log",
    "error_log",
    "error_page",
    "location",
    "{",
    "}",
)

LISTEN_DEFAULT_PORT = 7979

_LOCATION_KEY_COUNT = 8
_SEPARATORS = "{};"
_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


def _atoi(text: str) -> int:
    """Read a leading integer the lenient way; 0 when there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _require(tokens: Sequence[str], pos: int) -> str:
    if pos >= len(tokens):
        raise ConfigError("Unexpected end of configuration")
    return tokens[pos]


def _line_values(tokens: Sequence[str], pos: int) -> tuple[list[str], int]:
    """Return the tokens from ``pos`` up to the next newline token and its position."""
    end = pos
    while end < len(tokens) and tokens[end] != "\n":
        end += 1
    return list(tokens[pos:end]), end


def conf_key_map(section_key: str) -> dict[str, int]:
    """Return a fresh directive counter for a section."""
    if section_key == "location":
        return dict.fromkeys(CONF_KEYS[:_LOCATION_KEY_COUNT], 0)
    return {}


def check_key_count(counter: Mapping[str, int]) -> None:
    """Raise ConfigError if any directive appeared more than once."""
    if any(count > 1 for count in counter.values()):
        raise ConfigError("Duplicate key found")


def tokenize(full_text: str) -> list[str]:
    """Split configuration text into words, braces, semicolons and line marks.

    Every brace or semicolon is followed by a ``"\\n"`` token; spaces end a
    word and raw newlines are dropped.
    """
    tokens: list[str] = []
    word: list[str] = []
    for char in full_text:
        if char in _SEPARATORS or char == " ":
            if word:
                tokens.append("".join(word))
                word.clear()
            if char in _SEPARATORS:
                tokens.extend((char, "\n"))
        elif char != "\n":
            word.append(char)
    if word:
        tokens.append("".join(word))
    return tokens


def count_word(tokens: Sequence[str], word: str) -> int:
    """Count the tokens equal to ``word``."""
    return sum(1 for token in tokens if token == word)


def string_to_bool(text: str) -> bool:
    """Interpret ``on`` or ``1`` as true, anything else as false."""
    return trim_line(text) in ("on", "1")


def _bump(counter: dict[str, int], key: str) -> None:
    counter[key] = counter.get(key, 0) + 1


def parse_location(tokens: Sequence[str], start: int) -> tuple[LocationConf, int]:
    """Build a location from ``tokens`` starting at its path token.

    Returns the location and the position of its closing brace (or the end
    of the tokens).
    """
    location = LocationConf()
    counter = conf_key_map("location")
    pos = start
    count = len(tokens)
    while pos < count:
        token = tokens[pos]
        if pos + 1 < count and tokens[pos + 1] == "{":
            location.path = token
        elif token == "}":
            break
        elif token == "root":
            pos += 1
            _bump(counter, "root")
            location.root = _require(tokens, pos)
        elif token == "upload_dir":
            pos += 1
            _bump(counter, "upload_dir")
            location.upload_store = _require(tokens, pos)
        elif token == "autoindex":
            pos += 1
            _bump(counter, "autoindex")
            location.auto_index = string_to_bool(_require(tokens, pos))
        elif token == "return":
            pos += 1
            _bump(counter, "return")
            code = _atoi(_require(tokens, pos))
            pos += 1
            location.add_return(code, _require(tokens, pos))
        elif token == "cgi_ext":
            pos += 1
            extension = _require(tokens, pos)
            pos += 1
            location.add_cgi_ext(extension, _require(tokens, pos))
        elif token in ("try_files", "index", "methods"):
            _bump(counter, token)
            values, pos = _line_values(tokens, pos + 1)
            add = {
                "try_files": location.add_try_file,
                "index": location.add_index,
                "methods": location.add_method,
            }[token]
            for value in values:
                add(value)
        pos += 1
    check_key_count(counter)
    return location, pos


def _add_error_pages(server: ServerConf, values: list[str]) -> None:
    codes: list[int] = []
    for value in values:
        code = _atoi(value)
        if code != 0:
            codes.append(code)
        else:
            for pending in codes:
                server.add_error_page(pending, value)
    if not codes:
        server.add_error_page(0, "\n")


def _set_listen(server: ServerConf, value: str) -> None:
    host, sep, port = value.partition(":")
    if sep:
        server.ip = host
        server.port = _atoi(port)
    else:
        server.ip = value
        server.port = LISTEN_DEFAULT_PORT


def parse_servers(tokens: Sequence[str]) -> list[ServerConf]:
    """Build one ServerConf for each ``server`` token in ``tokens``."""
    servers = [ServerConf() for _ in range(count_word(tokens, "server"))]
    count = len(tokens)
    pos = 0
    for server in servers:
        counter = conf_key_map("server")
        while pos < count:
            token = tokens[pos]
            if token == "server" and pos != 0:
                pos += 1
                break
            if token == "listen":
                pos += 1
                _bump(counter, "listen")
                _set_listen(server, _require(tokens, pos))
            elif token == "error_page":
                values, pos = _line_values(tokens, pos + 1)
                _add_error_pages(server, values)
            elif token == "server_name":
                _bump(counter, "server_name")
                values, pos = _line_values(tokens, pos + 1)
                for value in values:
                    server.add_server_name(value)
            elif token == "index":
                _bump(counter, "index")
                values, pos = _line_values(tokens, pos + 1)
                for value in values:
                    server.add_index(value)
            elif token == "root":
                pos += 1
                _bump(counter, "root")
                server.root = _require(tokens, pos)
            elif token == "access_log":
                pos += 1
                _bump(counter, "access_log")
                server.access_log = _require(tokens, pos)
            elif token == "error_log":
                pos += 1
                _bump(counter, "error_log")
                server.error_log = _require(tokens, pos)
            elif token == "client_max_body_size":
                pos += 1
                _bump(counter, "client_max_body_size")
                server.body_size = _atoi(_require(tokens, pos))
            elif token == "location":
                location, pos = parse_location(tokens, pos + 1)
                server.add_location(location)
            pos += 1
        check_key_count(counter)
    return servers