"""Configuration of a single ``server`` block."""

from __future__ import annotations

from webservpy.helpers import ConfigError, check_empty_and_trim, trim_line
from webservpy.location import LocationConf

DEFAULT_PORT = 7927

DEFAULT_ERROR_PAGES: dict[int, str] = {
    400: "<html><body><h1>400 Bad Request</h1><p>Sunucu isteğinizi anlayamadı.</p></body></html>",
    401: "<html><body><h1>401 Unauthorized</h1><p>Kimlik doğrulama gerekiyor.</p></body></html>",
    403: "<html><body><h1>403 Forbidden</h1><p>Erişim izniniz yok.</p></body></html>",
    404: "<html><body><h1>404 Not Found</h1><p>Sayfa bulunamadı.</p></body></html>",
    405: "<html><body><h1>405 Method Not Allowed</h1><p>HTTP metodu desteklenmiyor.</p></body></html>",
    500: "<html><body><h1>500 Internal Server err</h1><p>Sunucu hatası oluştu.</p></body></html>",
    501: "<html><body><h1>501 Not Implemented</h1><p>İşlev desteklenmiyor.</p></body></html>",
    503: "<html><body><h1>503 Service Unavailable</h1><p>Sunucu hizmet veremiyor.</p></body></html>",
}


class ServerConf:
    """Settings of one virtual server."""

    def __init__(self) -> None:
        self._ip = ""
        self._port = DEFAULT_PORT
        self._root = ""
        self._access_log = ""
        self._error_log = ""
        self._body_size = 0
        self.error_pages: dict[int, str] = {}
        self.default_error_pages: dict[int, str] = dict(DEFAULT_ERROR_PAGES)
        self.index: list[str] = []
        self.locations: list[LocationConf] = []
        self.server_names: list[str] = []

    def __repr__(self) -> str:
        return (
            f"ServerConf(ip={self._ip!r}, port={self._port!r}, "
            f"server_names={self.server_names!r}, root={self._root!r})"
        )

    @property
    def ip(self) -> str:
        return self._ip

    @ip.setter
    def ip(self, value: str) -> None:
        value = trim_line(value)
        self._ip = "127.0.0.1" if value == "localhost" else value

    @property
    def port(self) -> int:
        return self._port

    @port.setter
    def port(self, value: int) -> None:
        if value < 0 or value > 65535:
            raise ConfigError("Invalid port number")
        self._port = value

    @property
    def root(self) -> str:
        return self._root

    @root.setter
    def root(self, value: str) -> None:
        self._root = check_empty_and_trim(value, "Root")

    @property
    def body_size(self) -> int:
        return self._body_size

    @body_size.setter
    def body_size(self, value: int) -> None:
        if value <= 0:
            raise ConfigError("Invalid body size")
        self._body_size = value

    @property
    def error_log(self) -> str:
        return self._error_log

    @error_log.setter
    def error_log(self, value: str) -> None:
        self._error_log = check_empty_and_trim(value, "Error log")

    @property
    def access_log(self) -> str:
        return self._access_log

    @access_log.setter
    def access_log(self, value: str) -> None:
        self._access_log = check_empty_and_trim(value, "Access log")

    def add_location(self, location: LocationConf) -> None:
        """Append a location block."""
        self.locations.append(location)

    def add_error_page(self, code: int, page: str) -> None:
        """Register a custom error page for a status code."""
        if code < 100 or code > 599:
            raise ConfigError("Invalid error code")
        if page == ";" and self.error_pages.get(code):
            return
        self.error_pages[code] = check_empty_and_trim(page, "Error page")

    def add_server_name(self, name: str) -> None:
        """Add a server name; a trailing ';' after earlier names is ignored."""
        if name == ";" and self.server_names:
            return
        self.server_names.append(check_empty_and_trim(name, "Server name"))

    def add_index(self, index: str) -> None:
        """Add an index file name."""
        if index == ";" and self.index:
            return
        self.index.append(check_empty_and_trim(index, "Index"))