import pytest

from webservpy.helpers import (
    ConfigError,
    check_empty_and_trim,
    check_file_with_extension,
    create_and_move,
    file_exists,
    file_is_executable,
    is_just_character,
    semicolon_check,
    split_string,
    str_is_digit,
    trim_line,
    trim_with_characters,
    write_to_file,
)


def test_trim_line_strips_whitespace():
    assert trim_line("  \t hello world \r\n") == "hello world"


def test_trim_line_only_whitespace_is_empty():
    assert trim_line(" \t\r\n ") == ""


def test_trim_line_idempotent():
    once = trim_line("\n  root /var/www;  \t")
    assert trim_line(once) == once


def test_trim_with_characters():
    assert trim_with_characters('  "key",\n', '"",\t\n ') == "key"


@pytest.mark.parametrize(
    "text, char, expected",
    [("{ \n", "{", True), ("}}}", "}", True), ("{a", "{", False), ("", ";", True)],
)
def test_is_just_character(text, char, expected):
    assert is_just_character(text, char) is expected


@pytest.mark.parametrize(
    "line, expected",
    [
        ("listen 80;", True),
        ("listen 80", False),
        ("location /images {", True),
        ("{", True),
        ("}", True),
        (";", False),
        ("root /a; index b", False),
    ],
)
def test_semicolon_check(line, expected):
    assert semicolon_check(line) is expected


@pytest.mark.parametrize(
    "text, expected", [("404", True), ("40a", False), ("", True), ("-1", False)]
)
def test_str_is_digit(text, expected):
    assert str_is_digit(text) is expected


def test_split_string_trims_all_but_last():
    assert split_string("a , b ,c ", ",") == ["a", "b", "c "]


def test_split_string_without_separator():
    assert split_string("single", ",") == ["single"]


def test_check_empty_and_trim_returns_trimmed():
    assert check_empty_and_trim("  /var/www \n", "Root") == "/var/www"


@pytest.mark.parametrize("value", ["   ", ";", " ; ", ""])
def test_check_empty_and_trim_rejects_empty(value):
    with pytest.raises(ConfigError, match="Root: Value can not be empty"):
        check_empty_and_trim(value, "Root")


def test_create_and_move_splits_at_first_separator():
    assert create_and_move("GET /x HTTP/1.1", " ") == ("GET", "/x HTTP/1.1")


def test_create_and_move_any_of_characters():
    head, rest = create_and_move("ab\ncd ef", " \n")
    assert (head, rest) == ("ab", "cd ef")


def test_create_and_move_without_separator_keeps_text():
    assert create_and_move("abc", " ") == ("abc", "abc")


def test_write_to_file_appends_lines(tmp_path, capsys):
    log = tmp_path / "access.log"
    write_to_file(str(log), "first")
    write_to_file(str(log), "second")
    lines = log.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("[") and lines[0].endswith("] first")
    assert lines[1].endswith("] second")
    assert "*******>first" in capsys.readouterr().out


def test_write_to_file_reports_unopenable_file(tmp_path, capsys):
    write_to_file(str(tmp_path), "msg")
    assert "Error opening file: " + str(tmp_path) in capsys.readouterr().err


def test_file_exists(tmp_path):
    target = tmp_path / "page.html"
    target.write_text("x")
    assert file_exists(str(target)) is True
    assert file_exists(str(tmp_path / "missing")) is False


def test_check_file_with_extension_keeps_dotted_path(tmp_path):
    path = str(tmp_path / "missing.html")
    assert check_file_with_extension(path, {}) == path


def test_check_file_with_extension_existing_file(tmp_path):
    (tmp_path / "README").write_text("x")
    path = str(tmp_path / "README")
    assert check_file_with_extension(path, {}) == path


def test_check_file_with_extension_finds_html(tmp_path):
    (tmp_path / "index.html").write_text("x")
    (tmp_path / "index.txt").write_text("y")
    base = str(tmp_path / "index")
    assert check_file_with_extension(base, {}) == base + ".html"


def test_check_file_with_extension_uses_cgi_extensions(tmp_path):
    (tmp_path / "script.py").write_text("print()")
    base = str(tmp_path / "script")
    assert check_file_with_extension(base, {".py": "/usr/bin/python3"}) == base + ".py"


def test_check_file_with_extension_nothing_found(tmp_path):
    base = str(tmp_path / "nothing")
    assert check_file_with_extension(base, {".py": "/usr/bin/python3"}) == base


def test_file_is_executable():
    cgi = {".py": "/usr/bin/python3"}
    assert file_is_executable("/www/cgi-bin/run.py", ".py", cgi) == 1
    assert file_is_executable("/www/run.py", ".py", cgi) == -1
    assert file_is_executable("/www/cgi-bin/page.html", ".html", cgi) == 0