"""Validation and loading of configuration files."""

from __future__ import annotations

import re

from webservpy.helpers import (
    ConfigError,
    is_just_character,
    semicolon_check,
    trim_line,
)
from webservpy.parser import CONF_KEYS, parse_servers, tokenize
from webservpy.server_conf import ServerConf

_FIRST_WORD = re.compile(r"[^ \t\n]*")
_UNBALANCED = "Unexpected end of file, expecting paranthesis"


def _first_word(text: str) -> str:
    return _FIRST_WORD.match(text).group(0)


class ConfigChecker:
    """Checks a configuration file and builds its server configurations."""

    def __init__(self, file_name: str) -> None:
        self.file_name = file_name
        self.full_text = ""
        self.servers: list[ServerConf] = []

    def check_file_extension(self) -> None:
        """Require the file name to end in ``.conf``."""
        extension = self.file_name[self.file_name.rfind(".") + 1:]
        if extension != "conf":
            raise ConfigError("File extension is not .conf")

    def read_file(self) -> str:
        """Read the file without blank lines and comments, each line trimmed."""
        try:
            with open(self.file_name, encoding="utf-8", newline="\n") as conf_file:
                lines = conf_file.read().split("\n")
        except OSError as exc:
            raise ConfigError("No such file or directory") from exc
        kept = []
        for line in lines:
            trimmed = trim_line(line)
            if not trimmed or trimmed.startswith("#"):
                continue
            kept.append(trimmed.split("#", 1)[0] + "\n")
        text = "".join(kept)
        if (
            not text
            or is_just_character(text, "\n")
            or is_just_character(text, "\t")
            or is_just_character(text, " ")
        ):
            raise ConfigError("Empty file")
        return text

    def check_conf_key(self, element: str) -> None:
        """Raise ConfigError unless ``element`` is a known directive."""
        if element not in CONF_KEYS:
            raise ConfigError(f"Failed directive: {element}")

    def check_elements(self, text: str) -> None:
        """Check one server block: its header and every directive line."""
        if "server" not in text:
            raise ConfigError("Missing server directive!")
        brace = text.find("{")
        if brace != -1:
            head = _first_word(trim_line(text[:brace]))
        else:
            head = trim_line(_first_word(text))
        if head != "server":
            raise ConfigError("Missing server directive")

        skip = 2 if brace != -1 and text[brace + 1:brace + 2] == "\n" else 1
        rest = text[brace + skip:]
        while "\n" in rest:
            raw, rest = rest.split("\n", 1)
            line = trim_line(raw)
            if not semicolon_check(line):
                raise ConfigError(f"Missing semicolon: {line}")
            self.check_conf_key(_first_word(line))

    def brackets_check(self, text: str) -> None:
        """Check brace balance and validate every top-level block."""
        if text.count("{") != text.count("}"):
            raise ConfigError(_UNBALANCED)
        remaining = text
        while True:
            start = remaining.find("{")
            if start == -1:
                break
            end = 0
            scan = remaining
            while True:
                close = scan.find("}")
                if close == -1:
                    raise ConfigError(_UNBALANCED)
                end += close + 1
                block = remaining[start:end] if end >= start else remaining[start:]
                if block.count("{") == block.count("}"):
                    break
                scan = remaining[end:]
            self.check_elements(remaining[:end])
            remaining = remaining[end:]

    def check_config(self) -> list[ServerConf]:
        """Validate the file and return the server configurations it defines."""
        self.check_file_extension()
        self.full_text = self.read_file()
        self.brackets_check(self.full_text)
        self.servers = parse_servers(tokenize(self.full_text))
        return self.servers


def load_config(file_name: str) -> list[ServerConf]:
    """Validate ``file_name`` and return its server configurations."""
    return ConfigChecker(file_name).check_config()