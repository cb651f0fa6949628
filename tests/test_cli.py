from webservpy.cli import main


def test_requires_one_argument(capsys):
    assert main([]) == 1
    assert "Usage:" in capsys.readouterr().err


def test_rejects_two_arguments(capsys):
    assert main(["a.conf", "b.conf"]) == 1
    assert "<config_file>" in capsys.readouterr().err


def test_bad_extension(tmp_path, capsys):
    path = tmp_path / "server.txt"
    path.write_text("server {\n}\n")
    assert main([str(path)]) == 1
    assert "File extension is not .conf" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.conf")]) == 1
    assert "No such file or directory" in capsys.readouterr().err


def test_empty_file(tmp_path, capsys):
    path = tmp_path / "empty.conf"
    path.write_text("# only a comment\n\n")
    assert main([str(path)]) == 1
    assert "Empty file" in capsys.readouterr().err


def test_unknown_directive(tmp_path, capsys):
    path = tmp_path / "bad.conf"
    path.write_text("server {\nfoo bar;\n}\n")
    assert main([str(path)]) == 1
    assert "Failed directive: foo" in capsys.readouterr().err


def test_invalid_listen_address(tmp_path, capsys):
    path = tmp_path / "ip.conf"
    path.write_text("server {\nlisten 999.1.1.1:8080;\n}\n")
    assert main([str(path)]) == 1
    assert "Invalid IP Address: 999.1.1.1" in capsys.readouterr().err