import pytest
import yaml

from formpatch.config import DEFAULT_CONFIG_FILE, get_config_from_spec, get_config_path
from formpatch.registry import RegistryConfig
from formpatch.utils.serialize import UNSET, recursive_merge


def test_default_config_matches_registry_defaults():
    config = get_config_from_spec(str(DEFAULT_CONFIG_FILE))
    assert RegistryConfig(**config["registry"]) == RegistryConfig()


def test_builtin_config_by_name():
    assert get_config_path("default") == DEFAULT_CONFIG_FILE
    assert get_config_path("default.yaml") == DEFAULT_CONFIG_FILE


def test_missing_config_file():
    with pytest.raises(FileNotFoundError):
        get_config_path("no-such-config")


def test_key_value_spec():
    assert get_config_from_spec("registry.mode=load") == {"registry": {"mode": "load"}}
    assert get_config_from_spec("registry.warn_on_load=false") == {"registry": {"warn_on_load": False}}
    assert get_config_from_spec("registry.kind_tags={defun: el-patch-defun}") == {
        "registry": {"kind_tags": {"defun": "el-patch-defun"}}
    }


def test_config_file_from_path(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text(yaml.safe_dump({"registry": {"directive_prefix": "el-patch-"}}))
    assert get_config_from_spec(str(tmp_path / "custom")) == {"registry": {"directive_prefix": "el-patch-"}}


def test_recursive_merge():
    merged = recursive_merge(
        {"registry": {"mode": "build", "wildcard": "..."}},
        None,
        {"registry": {"mode": "load", "kind_tags": {"defun": "x"}}},
        {"registry": {"wildcard": UNSET}},
    )
    assert merged == {"registry": {"mode": "load", "wildcard": "...", "kind_tags": {"defun": "x"}}}
