"""Tests for the sealwrap CLI."""

import base64
from unittest.mock import patch

import pytest

from sealwrap.cli import main

AES_KEY = base64.b64encode(b"\x07" * 32).decode()


def _write(tmp_path, body, name="server.yaml"):
    path = tmp_path / name
    path.write_text(body)
    return str(path)


def test_status_prints_seal_info(tmp_path, capsys):
    path = _write(
        tmp_path,
        "seal:\n"
        "  aead:\n"
        "    purpose: barrier\n"
        f"    key: {AES_KEY}\n",
    )

    assert main(["status", "--config", path]) == 0

    out = capsys.readouterr().out
    assert "Seal Type: aead" in out
    assert "barrier AEAD Type: aes-gcm" in out


def test_status_without_seal(tmp_path, capsys):
    path = _write(tmp_path, "log_level: info\n")

    assert main(["status", "--config", path]) == 0
    assert "shamir" in capsys.readouterr().out


def test_status_pkcs11(tmp_path, capsys):
    path = _write(tmp_path, "seal:\n  pkcs11: {}\n")

    assert main(["status", "--config", path]) == 1
    assert "Vault Enterprise HSM" in capsys.readouterr().err


def test_status_unknown_type(tmp_path, capsys):
    path = _write(tmp_path, "seal:\n  bogus: {}\n")

    assert main(["status", "--config", path]) == 1
    assert "bogus" in capsys.readouterr().err


def test_status_missing_file(tmp_path, capsys):
    assert main(["status", "--config", str(tmp_path / "nope.yaml")]) == 1
    assert "Error loading configuration" in capsys.readouterr().err


def test_random(capsys):
    assert main(["random", "-n", "16"]) == 0

    out = capsys.readouterr().out.strip()
    assert len(bytes.fromhex(out)) == 16


def test_no_command(capsys):
    assert main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()


def test_status_two_seals_keep_their_own_labels(tmp_path, capsys):
    path = _write(
        tmp_path,
        "seal:\n"
        "  - aead:\n"
        f"      key: {AES_KEY}\n"
        "  - shamir: {}\n",
    )

    assert main(["status", "--config", path]) == 0

    out = capsys.readouterr().out
    assert "Seal Type 1: aead" in out
    assert "Seal Type 2: shamir" in out
    assert "AEAD Type: aes-gcm" in out


def test_status_unreachable_transit_exits_with_error(tmp_path, capsys, monkeypatch):
    pytest.importorskip("hvac")
    requests = pytest.importorskip("requests")
    for name in ("VAULT_ADDR", "VAULT_TRANSIT_SEAL_KEY_NAME", "VAULT_TRANSIT_SEAL_MOUNT_PATH"):
        monkeypatch.delenv(name, raising=False)

    path = _write(
        tmp_path,
        "seal:\n"
        "  transit:\n"
        "    address: http://127.0.0.1:1\n"
        "    key_name: k\n"
        "    mount_path: transit\n",
    )

    with patch("hvac.Client") as client_cls:
        client_cls.return_value.secrets.transit.read_key.side_effect = (
            requests.exceptions.ConnectionError("connection refused")
        )
        assert main(["status", "--config", path]) == 1

    err = capsys.readouterr().err
    assert "Error configuring seal" in err
    assert "127.0.0.1:1" in err
