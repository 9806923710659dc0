"""
Tests for the operator CLI.
"""
import re

import orjson
import pytest

from navigator_secret.__main__ import main

HEX_64 = re.compile(r"[0-9a-f]{64}")


class TestGenerate:

    def test_prints_secret_and_instructions(self, capsys):
        assert main(["generate"]) == 0
        out = capsys.readouterr().out
        assert HEX_64.search(out)
        assert "EXPRESS_SESSION_SECRET=" in out

    def test_json_output(self, capsys):
        assert main(["generate", "--json"]) == 0
        data = orjson.loads(capsys.readouterr().out)
        assert HEX_64.fullmatch(data["secret"])
        assert data["length"] == 64

    def test_uses_shared_generator(self, capsys, monkeypatch):
        monkeypatch.setattr(
            "navigator_secret.__main__.generate_secret", lambda: "f" * 64
        )
        main(["generate", "--json"])
        assert orjson.loads(capsys.readouterr().out)["secret"] == "f" * 64


class TestRotate:

    def test_rotate_file_secret(self, capsys, monkeypatch, tmp_path):
        monkeypatch.setenv("SECRETKEY_PATH", str(tmp_path))
        tmp_path.joinpath("session.secret").write_text("o" * 64)
        assert main(["rotate"]) == 0
        assert tmp_path.joinpath("session.secret.previous").read_text() == "o" * 64
        assert HEX_64.fullmatch(tmp_path.joinpath("session.secret").read_text())

    def test_rotate_refused_for_explicit_secret(self, capsys, monkeypatch, tmp_path):
        monkeypatch.setenv("SECRETKEY_PATH", str(tmp_path))
        monkeypatch.setenv("EXPRESS_SESSION_SECRET", "e" * 64)
        assert main(["rotate"]) == 1
        assert "error:" in capsys.readouterr().err


class TestPath:

    def test_path(self, capsys, monkeypatch, tmp_path):
        monkeypatch.setenv("SECRETKEY_PATH", str(tmp_path))
        assert main(["path"]) == 0
        assert capsys.readouterr().out.strip() == str(tmp_path / "session.secret")

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])
