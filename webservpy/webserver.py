"""Non-blocking HTTP server driven by parsed server configurations."""

from __future__ import annotations

import errno
import logging
import os
import re
import selectors
import socket
import stat
from collections.abc import Sequence
from dataclasses import dataclass, field

from webservpy.helpers import (
    ConfigError,
    file_exists,
    str_is_digit,
    write_to_file,
)
from webservpy.http_request import HttpRequest
from webservpy.location import LocationConf
from webservpy.responses import (
    ForbiddenFile,
    create_error_response,
    create_http_response,
    read_html_file,
)
from webservpy.server_conf import ServerConf

logger = logging.getLogger(__name__)

ACCESS_LOG = "access.log"
RECV_SIZE = 4096

_POLL_INTERVAL = 0.2
_HEADER_END = b"\r\n\r\n"
_CONTENT_LENGTH = b"Content-Length:"
_LEADING_INT_BYTES = re.compile(rb"\s*([+-]?\d+)")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _status_number(status: str) -> int:
    match = _LEADING_INT.match(status)
    return int(match.group(1)) if match else 0


def search_server_conf(
    confs: Sequence[ServerConf], server_name: str
) -> ServerConf:
    """Return the first configuration naming ``server_name``, else the first one."""
    if not confs:
        raise ValueError("No server configurations")
    for conf in confs:
        if server_name in conf.server_names:
            return conf
    return confs[0]


def is_request_complete(data: bytes) -> bool:
    """Return True once the headers and the announced body have arrived."""
    header_end = data.find(_HEADER_END)
    if header_end == -1:
        return False
    header = data[:header_end]
    length = 0
    pos = header.find(_CONTENT_LENGTH)
    if pos != -1:
        match = _LEADING_INT_BYTES.match(header, pos + len(_CONTENT_LENGTH))
        length = int(match.group(1)) if match else 0
        if length < 0:
            return False
    return len(data) >= header_end + len(_HEADER_END) + length


def is_path_under_root(path: str, root: str) -> bool:
    """Return True if ``path`` starts with ``root``."""
    return path.startswith(root)


class _Reply(Exception):
    """Carries a finished response out of the request handling steps."""

    def __init__(self, response: bytes) -> None:
        super().__init__("reply")
        self.response = response


class Responder:
    """Works out the response to one parsed request for one server."""

    def __init__(
        self, conf: ServerConf, request: HttpRequest, client_info: str = ""
    ) -> None:
        self.conf = conf
        self.request = request
        self.client_info = client_info
        self.result_path = ""

    def respond(self) -> bytes:
        """Return the full response bytes; empty when nothing is to be sent."""
        try:
            self.result_path = self._find_request()
            method = self.request.method
            if method == "GET":
                return self._send_response("200 OK")
            if method == "DELETE":
                return self._delete()
            return b""
        except _Reply as reply:
            return reply.response

    def _read(self, path: str) -> bytes:
        try:
            return read_html_file(path, self.conf)
        except ForbiddenFile:
            raise _Reply(self._send_response("403 Forbidden")) from None

    def _send_response(self, status: str) -> bytes:
        request = self.request
        code_text = status.split(" ", 1)[0]
        code = _status_number(status)
        write_to_file(
            ACCESS_LOG,
            f"{self.client_info} {request.method} "
            f"{request.path}{request.request_file} {code_text}",
        )
        if code >= 400:
            return create_error_response(status, self.conf, self.conf.root)
        if 200 <= code <= 205:
            if request.method == "GET":
                body = self._read(self.result_path)
            elif request.method == "DELETE":
                body = self._read(self.conf.root + "/index.html")
            else:
                return b""
            return create_http_response(code_text, "OK", "text/html", body)
        return b""

    def _index_path(self, merged: str, index: Sequence[str]) -> str:
        for name in index:
            candidate = merged + name
            if file_exists(candidate):
                return candidate
        raise _Reply(self._send_response("404 Not Found"))

    def _find_request(self) -> str:
        conf = self.conf
        request = self.request
        http_path = request.path
        root_index = 0
        merged = ""
        for i, location in enumerate(conf.locations):
            if location.path == "/":
                root_index = i
            if http_path != location.path:
                continue
            if request.method not in location.methods:
                raise _Reply(self._send_response("405 Method Not Allowed"))
            merged = (location.root or conf.root) + http_path
            if request.request_file:
                merged += "/" + request.request_file
            else:
                merged = self._index_path(merged, location.index or conf.index)
            break
        if not merged:
            if not conf.locations:
                raise _Reply(self._send_response("404 Not Found"))
            raise _Reply(self._try_files(conf.locations[root_index], http_path))
        logger.debug("merged path %s", merged)
        return merged

    def _try_files(self, location: LocationConf, http_path: str) -> bytes:
        root = location.root or self.conf.root
        patterns = list(location.try_files)
        content = b""
        for i, pattern in enumerate(patterns):
            pos = pattern.find("$uri")
            if pos == -1 and str_is_digit(pattern):
                break
            candidate = http_path + pattern[pos + 4:]
            patterns[i] = candidate
            directory = root + candidate
            try:
                content = read_html_file(directory, self.conf)
            except ForbiddenFile:
                return self._send_response("403 Forbidden")
            if content:
                self.result_path = directory
                return self._send_response("200 OK")
        last = patterns[-1] if patterns else "404"
        return self._send_response(f"{last} Not Found")

    def _delete(self) -> bytes:
        conf = self.conf
        try:
            final_path = os.path.realpath(self.result_path, strict=True)
        except OSError:
            return self._send_response("404 Not Found")
        if not os.access(final_path, os.W_OK):
            return self._send_response("403 Forbidden")
        allowed_root = next(
            (
                location.root or conf.root
                for location in conf.locations
                if location.path == self.request.path
            ),
            "",
        )
        if not allowed_root:
            return self._send_response("403 Forbidden")
        try:
            resolved_root = os.path.realpath(allowed_root, strict=True)
        except OSError:
            return self._send_response("500 Internal Server Error")
        if not is_path_under_root(final_path, resolved_root):
            return self._send_response("403 Forbidden")
        try:
            info = os.stat(final_path)
        except OSError:
            return self._send_response("404 Not Found")
        if not stat.S_ISREG(info.st_mode):
            return self._send_response("403 Forbidden")
        try:
            os.remove(final_path)
        except OSError:
            return self._send_response("500 Internal Server Error")
        return self._send_response("200 OK")


@dataclass
class _Listener:
    sock: socket.socket
    confs: list[ServerConf]


@dataclass
class _Client:
    sock: socket.socket
    address: tuple
    data: bytearray = field(default_factory=bytearray)
    request: HttpRequest | None = None
    conf: ServerConf | None = None
    outgoing: bytes | None = None


class WebServer:
    """Listens on every configured address and answers HTTP requests."""

    def __init__(self, server_confs: Sequence[ServerConf]) -> None:
        self.server_confs = list(server_confs)
        self._listeners: dict[tuple[str, int], _Listener] = {}
        self._clients: dict[socket.socket, _Client] = {}
        self._selector: selectors.BaseSelector | None = None
        self._opened = False
        self._serving = False
        self._closing = False

    def open_sockets(self) -> None:
        """Bind and listen on each distinct address of the configurations."""
        self._opened = True
        for conf in self.server_confs:
            key = (conf.ip, conf.port)
            address = f"{conf.ip}:{conf.port}"
            if key in self._listeners:
                self._listeners[key].confs.append(conf)
                write_to_file(
                    conf.error_log,
                    f"Duplicate IP and Port in configuration: {address}",
                )
                continue
            try:
                socket.inet_pton(socket.AF_INET, conf.ip)
            except OSError as exc:
                raise ConfigError(f"Invalid IP Address: {conf.ip}") from exc
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setblocking(False)
            try:
                sock.bind(key)
            except OSError as exc:
                sock.close()
                if exc.errno == errno.EADDRINUSE:
                    write_to_file(conf.error_log, f"Port in use: {address}")
                else:
                    write_to_file(conf.error_log, f"Bind error: {exc.strerror}")
                continue
            try:
                sock.listen(socket.SOMAXCONN)
            except OSError as exc:
                sock.close()
                raise OSError(f"Listen failed on socket for {address}") from exc
            self._listeners[key] = _Listener(sock, [conf])

    def serve_forever(self) -> None:
        """Run the event loop until close() is called."""
        if not self._opened:
            self.open_sockets()
        selector = selectors.DefaultSelector()
        self._selector = selector
        self._serving = True
        for listener in self._listeners.values():
            selector.register(listener.sock, selectors.EVENT_READ, listener)
        try:
            while not self._closing:
                for key, events in selector.select(timeout=_POLL_INTERVAL):
                    target = key.data
                    if isinstance(target, _Listener):
                        self._accept(target)
                    elif events & selectors.EVENT_READ:
                        self._read(target)
                    elif events & selectors.EVENT_WRITE:
                        self._write(target)
        finally:
            self._serving = False
            self._release()

    def close(self) -> None:
        """Stop serving and close every socket."""
        self._closing = True
        if not self._serving:
            self._release()

    def __enter__(self) -> WebServer:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _accept(self, listener: _Listener) -> None:
        while True:
            try:
                sock, address = listener.sock.accept()
            except BlockingIOError:
                return
            except OSError as exc:
                for conf in listener.confs:
                    write_to_file(conf.error_log, f"Accept error: {exc.strerror}")
                return
            sock.setblocking(False)
            client = _Client(sock, address)
            self._clients[sock] = client
            self._selector.register(sock, selectors.EVENT_READ, client)

    def _read(self, client: _Client) -> None:
        while True:
            try:
                chunk = client.sock.recv(RECV_SIZE)
            except BlockingIOError:
                break
            except OSError as exc:
                logger.warning("error reading from client: %s", exc)
                self._close_client(client)
                return
            if not chunk:
                self._close_client(client)
                return
            client.data += chunk
            if is_request_complete(client.data):
                break
        if not client.data:
            return
        try:
            request = HttpRequest().parse(client.data.decode("utf-8", errors="replace"))
        except ValueError as exc:
            logger.warning("error parsing request: %s", exc)
            self._close_client(client)
            return
        client.request = request
        client.conf = search_server_conf(self.server_confs, request.host_name)
        client.data.clear()
        self._selector.modify(client.sock, selectors.EVENT_WRITE, client)

    def _write(self, client: _Client) -> None:
        if client.outgoing is None:
            responder = Responder(client.conf, client.request, self._client_info(client))
            client.outgoing = responder.respond()
        if client.outgoing:
            try:
                sent = client.sock.send(client.outgoing)
            except BlockingIOError:
                return
            except OSError:
                self._close_client(client)
                return
            client.outgoing = client.outgoing[sent:]
            if client.outgoing:
                return
        self._close_client(client)

    @staticmethod
    def _client_info(client: _Client) -> str:
        peer_ip, peer_port = client.address[:2]
        info = f"Socket info: {peer_ip}:{peer_port}"
        try:
            local_ip, local_port = client.sock.getsockname()[:2]
        except OSError as exc:
            return f"{info}Error getting socket name: {exc.strerror}"
        return f"{info} -> {local_ip}:{local_port}"

    def _close_client(self, client: _Client) -> None:
        if self._selector is not None:
            try:
                self._selector.unregister(client.sock)
            except (KeyError, ValueError):
                pass
        client.sock.close()
        self._clients.pop(client.sock, None)

    def _release(self) -> None:
        for client in list(self._clients.values()):
            self._close_client(client)
        for listener in self._listeners.values():
            listener.sock.close()
        self._listeners.clear()
        if self._selector is not None:
            self._selector.close()
            self._selector = None