"""Configuration of a single ``location`` block."""

from __future__ import annotations

from webservpy.helpers import (
    ConfigError,
    check_empty_and_trim,
    str_is_digit,
    trim_line,
)

ALLOWED_METHODS = ("GET", "POST", "DELETE")


class LocationConf:
    """Settings that apply to requests under one location path."""

    def __init__(self) -> None:
        self._path = ""
        self._root = ""
        self._upload_store = ""
        self.auto_index = False
        self.methods: list[str] = []
        self.try_files: list[str] = []
        self.index: list[str] = []
        self.returns: dict[int, str] = {}
        self.cgi_ext: dict[str, str] = {}

    def __repr__(self) -> str:
        return (
            f"LocationConf(path={self._path!r}, root={self._root!r}, "
            f"methods={self.methods!r}, index={self.index!r})"
        )

    @property
    def path(self) -> str:
        return self._path

    @path.setter
    def path(self, value: str) -> None:
        self._path = check_empty_and_trim(value, "Path")

    @property
    def root(self) -> str:
        return self._root

    @root.setter
    def root(self, value: str) -> None:
        self._root = check_empty_and_trim(value, "Root")

    @property
    def upload_store(self) -> str:
        return self._upload_store

    @upload_store.setter
    def upload_store(self, value: str) -> None:
        self._upload_store = check_empty_and_trim(value, "Upload store")

    def add_method(self, method: str) -> None:
        """Allow an HTTP method; a trailing ';' after earlier methods is ignored."""
        if method == ";" and self.methods:
            return
        value = check_empty_and_trim(method, "Method")
        if value not in ALLOWED_METHODS:
            raise ConfigError("Invalid method")
        self.methods.append(value)

    def add_try_file(self, file: str) -> None:
        """Add a try_files entry: a ``$uri`` pattern or a status code."""
        if file == ";" and self.try_files:
            return
        value = check_empty_and_trim(file, "Try files")
        if "=" in value:
            value = trim_line(value[value.rfind("=") + 1:])
        is_code = str_is_digit(value)
        if not is_code and not value.startswith("$uri"):
            raise ConfigError("Invalid format int files")
        if not is_code and len(value) > 4 and "$uri" in value[4:]:
            raise ConfigError("Invalid format int files")
        self.try_files.append(value)

    def add_index(self, file: str) -> None:
        """Add an index file name."""
        if file == ";" and self.index:
            return
        self.index.append(check_empty_and_trim(file, "Index"))

    def add_return(self, code: int, link: str) -> None:
        """Register a return directive for a status code."""
        if code < 100 or code > 599:
            raise ConfigError("Invalid return code")
        self.returns[code] = check_empty_and_trim(link, "Return")

    def add_cgi_ext(self, ext: str, path: str) -> None:
        """Map a CGI file extension to its interpreter path."""
        extension = check_empty_and_trim(ext, "Cgi extension")
        interpreter = check_empty_and_trim(path, "Cgi path")
        self.cgi_ext[extension] = interpreter