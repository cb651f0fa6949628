import pytest

from webservpy.location import LocationConf
from webservpy.responses import (
    ForbiddenFile,
    create_error_response,
    create_http_response,
    find_cgi_extensions,
    read_html_file,
)
from webservpy.server_conf import DEFAULT_ERROR_PAGES, ServerConf


def _content_length(response: bytes) -> int:
    head = response.split(b"\r\n\r\n", 1)[0].decode("utf-8")
    for line in head.split("\r\n"):
        name, _, value = line.partition(": ")
        if name == "Content-Length":
            return int(value)
    raise AssertionError("no Content-Length header")


def _body(response: bytes) -> bytes:
    return response.split(b"\r\n\r\n", 1)[1]


def _conf_with_cgi() -> ServerConf:
    conf = ServerConf()
    location = LocationConf()
    location.path = "/cgi-bin"
    location.add_cgi_ext(".py", "/usr/bin/python3")
    conf.add_location(location)
    return conf


def test_create_http_response_exact_bytes():
    response = create_http_response("200", "OK", "text/html", "hi")
    assert response == (
        b"HTTP/1.1 200 OK\r\nContent-Type: text/html\r\n"
        b"Content-Length: 2\r\nConnection: close\r\n\r\nhi"
    )


def test_create_http_response_counts_bytes():
    body = "Sayfa bulunamadı."
    response = create_http_response("404", "Not Found", "text/html", body)
    assert _content_length(response) == len(body.encode("utf-8"))
    assert _body(response) == body.encode("utf-8")


def test_find_cgi_extensions():
    conf = _conf_with_cgi()
    assert find_cgi_extensions(conf, "/cgi-bin") == {".py": "/usr/bin/python3"}
    assert find_cgi_extensions(conf, "/other") == {}


def test_read_html_file_reads_content(tmp_path):
    page = tmp_path / "index.html"
    page.write_bytes(b"<h1>home</h1>")
    assert read_html_file(str(page), ServerConf()) == b"<h1>home</h1>"


def test_read_html_file_empty_or_missing(tmp_path):
    conf = ServerConf()
    assert read_html_file("", conf) == b""
    assert read_html_file(str(tmp_path / "missing.html"), conf) == b""


def test_read_html_file_probes_extension(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "about.html").write_bytes(b"about page")
    assert read_html_file("about", ServerConf()) == b"about page"


def test_read_html_file_forbids_cgi_outside_cgi_bin(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "scripts").mkdir()
    (tmp_path / "scripts" / "run.py").write_bytes(b"print(1)")
    with pytest.raises(ForbiddenFile):
        read_html_file("scripts/run.py", _conf_with_cgi())


def test_read_html_file_allows_cgi_in_cgi_bin(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "cgi-bin").mkdir()
    (tmp_path / "cgi-bin" / "run.py").write_bytes(b"print(1)")
    assert read_html_file("cgi-bin/run.py", _conf_with_cgi()) == b"print(1)"


def test_error_response_uses_default_page():
    response = create_error_response("404 Not Found", ServerConf(), "")
    assert response.startswith(b"HTTP/1.1 404 Not Found\r\n")
    assert _body(response) == DEFAULT_ERROR_PAGES[404].encode("utf-8")
    assert _content_length(response) == len(_body(response))


def test_error_response_uses_custom_page(tmp_path):
    (tmp_path / "404.html").write_bytes(b"custom missing")
    conf = ServerConf()
    conf.add_error_page(404, "/404.html")
    response = create_error_response("404 Not Found", conf, str(tmp_path))
    assert _body(response) == b"custom missing"


def test_error_response_falls_back_when_custom_page_missing(tmp_path):
    conf = ServerConf()
    conf.add_error_page(403, "/nope.html")
    response = create_error_response("403 Forbidden", conf, str(tmp_path))
    assert _body(response) == DEFAULT_ERROR_PAGES[403].encode("utf-8")


def test_error_response_unknown_code_has_empty_body():
    response = create_error_response("418 Teapot", ServerConf(), "")
    assert response.startswith(b"HTTP/1.1 418 Teapot\r\n")
    assert _body(response) == b""
    assert _content_length(response) == 0