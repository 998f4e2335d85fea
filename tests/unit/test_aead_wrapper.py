"""Tests for the AEAD seal wrapper."""

import base64

import pytest

from sealwrap.wrapping.wrapper import WrapperConfigError, WrapperError, WrapperType
from sealwrap.wrapping.wrappers.aead import AEADWrapper


def _key(length=32):
    return base64.b64encode(bytes(range(length))).decode()


def test_set_config_reports_aead_type():
    wrapper = AEADWrapper()

    info = wrapper.set_config({"key": _key(), "key_id": "barrier-key"})

    assert info == {"aead_type": "aes-gcm"}
    assert wrapper.key_id == "barrier-key"
    assert wrapper.wrapper_type == WrapperType.AEAD


def test_encrypt_decrypt_with_aad():
    wrapper = AEADWrapper()
    wrapper.set_config({"key": _key()})

    blob = wrapper.encrypt(b"root key material", aad=b"barrier")

    assert blob.ciphertext != b"root key material"
    assert len(blob.iv) == AEADWrapper.NONCE_SIZE
    assert blob.key_info.mechanism == "aes-gcm"
    assert wrapper.decrypt(blob, aad=b"barrier") == b"root key material"


def test_wrong_aad_fails():
    wrapper = AEADWrapper()
    wrapper.set_config({"key": _key()})
    blob = wrapper.encrypt(b"secret", aad=b"one")

    with pytest.raises(WrapperError, match="authentication tag"):
        wrapper.decrypt(blob, aad=b"two")


def test_nonces_differ():
    wrapper = AEADWrapper()
    wrapper.set_config({"key": _key()})

    assert wrapper.encrypt(b"x").iv != wrapper.encrypt(b"x").iv


@pytest.mark.parametrize("length", [16, 24, 32])
def test_accepts_aes_key_sizes(length):
    wrapper = AEADWrapper()
    wrapper.set_config({"key": _key(length)})

    assert wrapper.decrypt(wrapper.encrypt(b"data")) == b"data"


def test_rejects_bad_key_length():
    with pytest.raises(WrapperConfigError, match="key length"):
        AEADWrapper().set_config({"key": _key(20)})


def test_rejects_invalid_base64():
    with pytest.raises(WrapperConfigError, match="base64"):
        AEADWrapper().set_config({"key": "not base64!!"})


def test_rejects_unknown_aead_type():
    with pytest.raises(WrapperConfigError, match="unsupported aead_type"):
        AEADWrapper().set_config({"aead_type": "chacha20-poly1305", "key": _key()})


def test_missing_key_configures_but_cannot_encrypt():
    wrapper = AEADWrapper()

    assert wrapper.set_config({}) == {"aead_type": "aes-gcm"}
    with pytest.raises(WrapperError, match="no key"):
        wrapper.encrypt(b"data")


def test_key_can_be_set_later():
    wrapper = AEADWrapper()
    wrapper.set_config({})
    wrapper.set_aes_gcm_key_bytes(b"\x01" * 32)

    assert wrapper.decrypt(wrapper.encrypt(b"late")) == b"late"
