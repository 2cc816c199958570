"""Loading configuration files and command line config specs."""

from pathlib import Path

import yaml

builtin_config_dir = Path(__file__).parent
DEFAULT_CONFIG_FILE = builtin_config_dir / "default.yaml"


def get_config_path(config_spec: str | Path) -> Path:
    """Find a config file: as given, then with a ``.yaml`` suffix, then among the builtin configs."""
    config_spec = Path(config_spec)
    candidates = [
        config_spec,
        config_spec.with_suffix(".yaml"),
        builtin_config_dir / config_spec,
        builtin_config_dir / config_spec.with_suffix(".yaml"),
    ]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    raise FileNotFoundError(f"Could not find config file for {config_spec} (tried: {candidates})")


def _key_value_spec_to_nested_dict(config_spec: str) -> dict:
    """``registry.mode=load`` -> ``{"registry": {"mode": "load"}}``. Values are parsed as YAML."""
    key, value = config_spec.split("=", 1)
    try:
        value = yaml.safe_load(value)
    except yaml.YAMLError:
        pass
    keys = key.split(".")
    result: dict = {}
    current = result
    for k in keys[:-1]:
        current[k] = {}
        current = current[k]
    current[keys[-1]] = value
    return result


def get_config_from_spec(config_spec: str | Path) -> dict:
    """Config dict from a file path, a builtin config name, or a ``key.path=value`` pair."""
    if isinstance(config_spec, str) and "=" in config_spec:
        return _key_value_spec_to_nested_dict(config_spec)
    path = get_config_path(config_spec)
    return yaml.safe_load(path.read_text()) or {}
