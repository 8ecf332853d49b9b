"""Unit tests for YAML configuration loading."""

import pytest

from etcdkv.config import config_from_dict, load_config
from etcdkv.errors import InvalidArgumentError
from etcdkv.types import ClientConfig


class TestLoadConfig:
    """Tests for load_config."""

    def test_full_config(self, tmp_path):
        """Should read every field."""
        path = tmp_path / "etcd.yaml"
        path.write_text(
            "endpoint: http://10.0.0.5:2379\n"
            "timeout: 5000\n"
            "swap_retry_delay: 25\n"
        )
        assert load_config(path) == ClientConfig(
            endpoint="http://10.0.0.5:2379", timeout=5000, swap_retry_delay=25
        )

    def test_defaults(self, tmp_path):
        """Omitted fields should keep their defaults."""
        path = tmp_path / "etcd.yaml"
        path.write_text("endpoint: http://127.0.0.1:2379\n")
        config = load_config(str(path))
        assert config.timeout == 1000
        assert config.swap_retry_delay == 100

    def test_not_a_mapping(self, tmp_path):
        """A document that is not a mapping should be rejected."""
        path = tmp_path / "etcd.yaml"
        path.write_text("- http://127.0.0.1:2379\n")
        with pytest.raises(InvalidArgumentError):
            load_config(path)

    def test_empty_file(self, tmp_path):
        """An empty file should be rejected."""
        path = tmp_path / "etcd.yaml"
        path.write_text("")
        with pytest.raises(InvalidArgumentError):
            load_config(path)


class TestConfigFromDict:
    """Tests for config_from_dict."""

    def test_unknown_keys(self):
        """Unknown keys should be named in the error."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            config_from_dict({"endpoint": "http://x", "retries": 3})
        assert "retries" in str(exc_info.value)

    @pytest.mark.parametrize(
        "data",
        [
            {"endpoint": "http://x", "timeout": "5000"},
            {"endpoint": "http://x", "timeout": 2.5},
            {"endpoint": "http://x", "swap_retry_delay": True},
            {"endpoint": 2379},
        ],
    )
    def test_wrong_value_types(self, data):
        """Values of the wrong type should be rejected."""
        with pytest.raises(InvalidArgumentError):
            config_from_dict(data)

    def test_quoted_timeout_in_yaml(self, tmp_path):
        """A quoted number in the file should be rejected, not passed on."""
        path = tmp_path / "etcd.yaml"
        path.write_text('endpoint: http://x\ntimeout: "5000"\n')
        with pytest.raises(InvalidArgumentError, match="timeout"):
            load_config(path)

    def test_missing_endpoint(self):
        """endpoint is required."""
        with pytest.raises(InvalidArgumentError):
            config_from_dict({"timeout": 100})
