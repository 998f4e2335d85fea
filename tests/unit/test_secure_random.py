"""Tests for the secure random reader."""

import pytest

from sealwrap.configutil.config import SharedConfig
from sealwrap.configutil.kms import SecureRandomReader, create_secure_random_reader
from sealwrap.wrapping.wrappers.aead import AEADWrapper


def test_reader_ignores_config_and_wrapper():
    assert isinstance(create_secure_random_reader(None, None), SecureRandomReader)
    assert isinstance(create_secure_random_reader(SharedConfig(), AEADWrapper()), SecureRandomReader)


def test_read_returns_requested_size():
    reader = create_secure_random_reader(None, None)

    assert len(reader.read(64)) == 64
    assert reader.read(0) == b""


def test_reads_do_not_repeat():
    reader = create_secure_random_reader(None, None)

    samples = {reader.read(32) for _ in range(100)}

    assert len(samples) == 100


def test_readinto_fills_buffer():
    reader = create_secure_random_reader(None, None)
    buffer = bytearray(48)

    assert reader.readinto(buffer) == 48
    assert buffer != bytearray(48)


def test_negative_size():
    with pytest.raises(ValueError):
        SecureRandomReader().read(-1)
