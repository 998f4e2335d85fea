"""
Unit tests for shared configuration parsing.

Tests cover:
- Seal stanza parsing (mapping and list forms)
- Purpose / disabled handling and value stringification
- Entropy blocks
- Loading YAML and JSON files
"""

import json

import pytest

from sealwrap.configutil.config import (
    ConfigError,
    Entropy,
    SharedConfig,
    load_config_file,
    parse_config,
    parse_entropy,
    parse_kmses,
)
from sealwrap.configutil.kms import KMS


class TestParseKMSes:
    """Tests for seal stanza parsing."""

    def test_single_mapping(self):
        kmses = parse_kmses({"awskms": {"region": "us-east-1", "kms_key_id": "alias/seal"}})

        assert kmses == [
            KMS(type="awskms", config={"region": "us-east-1", "kms_key_id": "alias/seal"})
        ]

    def test_list_keeps_file_order(self):
        kmses = parse_kmses(
            [
                {"transit": {"key_name": "seal", "mount_path": "transit"}},
                {"awskms": {"kms_key_id": "old", "disabled": True}},
            ]
        )

        assert [k.type for k in kmses] == ["transit", "awskms"]
        assert kmses[0].disabled is False
        assert kmses[1].disabled is True

    def test_purpose_and_disabled_are_lifted_out(self):
        (kms,) = parse_kmses({"aead": {"purpose": "barrier", "disabled": "false", "key": "abc"}})

        assert kms.purpose == "barrier"
        assert kms.disabled is False
        assert kms.config == {"key": "abc"}

    def test_values_are_stringified(self):
        (kms,) = parse_kmses({"ocikms": {"auth_type_api_key": True, "retries": 3, "unset": None}})

        assert kms.config == {"auth_type_api_key": "true", "retries": "3"}

    def test_type_is_lowercased(self):
        (kms,) = parse_kmses({"AWSKMS": {}})

        assert kms.type == "awskms"

    def test_empty_body(self):
        (kms,) = parse_kmses({"shamir": None})

        assert kms == KMS(type="shamir")

    def test_none_means_no_seals(self):
        assert parse_kmses(None) == []

    def test_too_many_blocks(self):
        with pytest.raises(ConfigError, match="two or less"):
            parse_kmses([{"awskms": {}}, {"transit": {}}, {"gcpckms": {}}])

    def test_non_string_purpose(self):
        with pytest.raises(ConfigError, match="purpose"):
            parse_kmses({"aead": {"purpose": ["a", "b"]}})

    def test_bad_disabled(self):
        with pytest.raises(ConfigError, match="boolean"):
            parse_kmses({"aead": {"disabled": "maybe"}})

    def test_bad_shape(self):
        with pytest.raises(ConfigError):
            parse_kmses("awskms")

    def test_custom_block_name_in_errors(self):
        with pytest.raises(ConfigError, match="'kms' blocks"):
            parse_kmses([{"aead": {}}, {"aead": {}}, {"aead": {}}], block_name="kms")


class TestParseEntropy:
    """Tests for entropy blocks."""

    def test_augmentation(self):
        assert parse_entropy({"seal": {"mode": "augmentation"}}) == Entropy(
            mode="augmentation", seal_name="seal"
        )

    def test_default_mode(self):
        assert parse_entropy({"seal": None}).mode == "augmentation"

    def test_unknown_mode(self):
        with pytest.raises(ConfigError, match="unknown mode"):
            parse_entropy({"seal": {"mode": "replace"}})

    def test_absent(self):
        assert parse_entropy(None) is None


class TestParseConfig:
    """Tests for whole-document parsing."""

    def test_defaults(self):
        assert parse_config(None) == SharedConfig()

    def test_fields(self):
        config = parse_config(
            {
                "seal": {"transit": {"key_name": "seal", "mount_path": "transit"}},
                "log_level": "DEBUG",
                "cluster_name": "primary",
                "disable_mlock": True,
            }
        )

        assert config.seals[0].type == "transit"
        assert config.log_level == "debug"
        assert config.cluster_name == "primary"
        assert config.disable_mlock is True

    def test_root_must_be_mapping(self):
        with pytest.raises(ConfigError):
            parse_config(["seal"])


class TestLoadConfigFile:
    """Tests for loading files."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text(
            "seal:\n"
            "  awskms:\n"
            "    region: eu-west-1\n"
            "    kms_key_id: alias/seal\n"
            "log_level: warn\n"
        )

        config = load_config_file(path)

        assert config.seals == [
            KMS(type="awskms", config={"region": "eu-west-1", "kms_key_id": "alias/seal"})
        ]
        assert config.log_level == "warn"

    def test_json(self, tmp_path):
        path = tmp_path / "server.json"
        path.write_text(json.dumps({"seal": [{"aead": {"purpose": "barrier"}}]}))

        config = load_config_file(str(path))

        assert config.seals[0].purpose == "barrier"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_file(tmp_path / "missing.yaml")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "server.hcl"
        path.write_text('seal "awskms" {}')

        with pytest.raises(ConfigError, match="Unsupported config format"):
            load_config_file(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text("seal: [unclosed\n")

        with pytest.raises(ConfigError, match="failed to parse"):
            load_config_file(path)
