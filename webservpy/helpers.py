"""String, file and path helpers shared by the configuration and HTTP code."""

from __future__ import annotations

import sys
import time
import os
from collections.abc import Mapping

_WHITESPACE = " \t\n\r"
_DIGITS = frozenset("0123456789")
_FALLBACK_EXTENSIONS = (".html", ".txt")


class ConfigError(ValueError):
    """Raised when a configuration file or value is invalid."""


def trim_line(text: str) -> str:
    """Strip spaces, tabs, carriage returns and newlines from both ends."""
    return text.strip(_WHITESPACE)


def trim_with_characters(text: str, characters: str) -> str:
    """Strip every character found in ``characters`` from both ends."""
    return text.strip(characters)


def is_just_character(text: str, char: str) -> bool:
    """Return True if ``text`` holds nothing but ``char`` and whitespace."""
    return all(c == char or c in " \t\n" for c in text)


def semicolon_check(text: str) -> bool:
    """Return True if a configuration line is correctly terminated."""
    pos = text.find(";")
    if pos == -1:
        return (
            is_just_character(text, "{")
            or is_just_character(text, "}")
            or "location" in text
        )
    return not (is_just_character(text, ";") or pos != len(text) - 1)


def str_is_digit(text: str) -> bool:
    """Return True if every character is an ASCII digit (empty text counts)."""
    return all(c in _DIGITS for c in text)


def split_string(text: str, separator: str) -> list[str]:
    """Split on ``separator``; every piece but the last is trimmed."""
    pieces = text.split(separator)
    return [trim_line(piece) for piece in pieces[:-1]] + [pieces[-1]]


def check_empty_and_trim(value: str, error_msg: str) -> str:
    """Trim ``value`` and raise ConfigError if nothing meaningful is left."""
    trimmed = trim_line(value)
    if not trimmed or is_just_character(trimmed, ";"):
        raise ConfigError(f"{error_msg}: Value can not be empty")
    return trimmed


def write_to_file(file_name: str, message: str) -> None:
    """Append a timestamped line to ``file_name``; report failures on stderr."""
    print(f"*******>{message}")
    stamp = time.ctime()
    try:
        with open(file_name, "a", encoding="utf-8") as log:
            log.write(f"[{stamp}] {message}\n")
    except OSError:
        print(f"[{stamp}] Error opening file: {file_name}", file=sys.stderr)


def create_and_move(text: str, characters: str) -> tuple[str, str]:
    """Cut ``text`` at the first of ``characters``.

    Returns the part before the separator and the part after it. When no
    separator is present, both parts are the whole text.
    """
    positions = [p for p in (text.find(c) for c in characters) if p != -1]
    if not positions:
        return text, text
    pos = min(positions)
    return text[:pos], text[pos + 1:]


def file_exists(path: str) -> bool:
    """Return True if ``path`` can be opened for reading."""
    return bool(path) and os.access(path, os.R_OK)


def check_file_with_extension(path: str, cgi_ext_map: Mapping[str, str]) -> str:
    """Resolve an extension-less path by probing known extensions."""
    if "." in path or file_exists(path):
        return path
    extensions = list(_FALLBACK_EXTENSIONS) + sorted(cgi_ext_map)
    for extension in extensions:
        candidate = path + extension
        if file_exists(candidate):
            return candidate
    return path


def file_is_executable(
    path: str, extension: str, cgi_ext_map: Mapping[str, str]
) -> int:
    """Classify a file for CGI handling.

    Returns 1 when the extension is a CGI extension and the file lies under
    ``cgi-bin/``, -1 when it is a CGI extension elsewhere, and 0 otherwise.
    """
    if extension in cgi_ext_map:
        return 1 if "cgi-bin/" in path else -1
    return 0