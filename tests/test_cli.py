import json

import pytest

from djauth import cli

HELLO = "pbkdf2_sha256$180000$btQDcwXF2RoK6Q$D4cC7bgbaIZGHsTdw9TYhRfuLfLGbsZlI4Rp802e7kU="


@pytest.fixture
def no_config(tmp_path):
    return ["-c", (tmp_path / "missing.json").as_posix()]


def _answers(monkeypatch, *answers):
    it = iter(answers)
    monkeypatch.setattr(cli, "_prompt", lambda prompt: next(it))


def test_encode_with_flags(no_config, capsys):
    rc = cli.main(no_config + ["encode", "--password", "hello", "--salt", "btQDcwXF2RoK6Q", "--iterations", "0"])
    assert rc == 0
    assert capsys.readouterr().out.strip() == f"Encoded password: {HELLO}"


def test_encode_prompts_and_retries_iterations(no_config, monkeypatch, capsys):
    monkeypatch.setattr(cli, "_prompt_password", lambda prompt: "hello")
    _answers(monkeypatch, "btQDcwXF2RoK6Q", "lots", "-3", "")
    rc = cli.main(no_config + ["encode"])
    out = capsys.readouterr().out
    assert rc == 0
    assert out.count("Please input a number, try again!") == 2
    assert HELLO in out


def test_encode_uses_configured_iterations(tmp_path, monkeypatch, capsys):
    path = tmp_path / "djauth.json"
    path.write_text(json.dumps({"hasher": {"iterations": 3}}), encoding="utf-8")
    monkeypatch.setattr(cli, "_prompt", lambda prompt: pytest.fail("should not prompt"))
    rc = cli.main(["-c", path.as_posix(), "encode", "--password", "p", "--salt", "s"])
    assert rc == 0
    assert "pbkdf2_sha256$3$s$" in capsys.readouterr().out


def test_encode_bad_salt(no_config, capsys):
    rc = cli.main(no_config + ["encode", "--password", "p", "--salt", "a$b", "--iterations", "1"])
    assert rc == 2
    assert "Encoding error" in capsys.readouterr().out


def test_encode_rejects_non_numeric_iterations_flag(no_config):
    with pytest.raises(SystemExit):
        cli.main(no_config + ["encode", "--password", "p", "--salt", "s", "--iterations", "ten"])


def test_verify_success(no_config, capsys):
    rc = cli.main(no_config + ["verify", "--password", "hello", "--encoded", HELLO])
    assert rc == 0
    assert "Password verified!" in capsys.readouterr().out


def test_verify_failure(no_config, monkeypatch, capsys):
    monkeypatch.setattr(cli, "_prompt_password", lambda prompt: "world")
    _answers(monkeypatch, HELLO + "\n")
    rc = cli.main(no_config + ["verify"])
    assert rc == 1
    assert "Password verification failed!" in capsys.readouterr().out


def test_verify_error(no_config, capsys):
    rc = cli.main(no_config + ["verify", "--password", "world", "--encoded", "abc$edf"])
    assert rc == 2
    assert "Verification error" in capsys.readouterr().out


def test_bad_log_level_reports_configuration_error(no_config, capsys):
    rc = cli.main(no_config + ["--log-level", "LOUD", "verify", "--password", "p", "--encoded", HELLO])
    assert rc == 2
    assert "Configuration error" in capsys.readouterr().out


def test_bad_config_file_reports_configuration_error(tmp_path, capsys):
    path = tmp_path / "djauth.json"
    path.write_text(json.dumps({"hasher": {"iterations": 1.9}}), encoding="utf-8")
    rc = cli.main(["-c", path.as_posix(), "encode", "--password", "p", "--salt", "s"])
    assert rc == 2
    assert "Configuration error" in capsys.readouterr().out


def test_verify_unencodable_stored_password(no_config, capsys):
    rc = cli.main(no_config + ["verify", "--password", "p", "--encoded", "pbkdf2_sha256$1$s$\udcff"])
    assert rc == 2
    assert "Verification error" in capsys.readouterr().out


def test_encode_iterations_above_int_max_rejected(no_config):
    with pytest.raises(SystemExit):
        cli.main(no_config + ["encode", "--password", "p", "--salt", "s", "--iterations", str(2**31)])
