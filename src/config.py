"""Provider configuration.

Configuration comes from an optional YAML provider file plus CLI overrides:
- kubeconfig: Path to a kubeconfig file
- kubeconfig_content: Inline kubeconfig text (mutually exclusive with kubeconfig)
- kubeconfig_context: Context name passed as --context
- kubectl_path: Client binary (default: kubectl)

Resolution order for the provider file:
1. Explicit path (--config)
2. $K8S_MANIFEST_CONFIG environment variable

The config value is passed explicitly to every lifecycle operation; nothing
here is cached at module level.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml


class ConfigError(Exception):
    """Configuration error."""


@dataclass
class ProviderConfig:
    """Credential context and client settings for kubectl invocations."""
    kubeconfig: str = ''
    kubeconfig_content: str = ''
    kubeconfig_context: str = ''
    kubectl_path: str = 'kubectl'

    def __repr__(self) -> str:
        # kubeconfig_content holds credentials
        content = '<set>' if self.kubeconfig_content else ''
        return (f"ProviderConfig(kubeconfig={self.kubeconfig!r}, "
                f"kubeconfig_content={content!r}, "
                f"kubeconfig_context={self.kubeconfig_context!r}, "
                f"kubectl_path={self.kubectl_path!r})")

    def merged(self, **overrides: Optional[str]) -> 'ProviderConfig':
        """Return a copy with non-empty overrides applied."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for key, value in overrides.items():
            if key not in values:
                raise ConfigError(f"Unknown provider setting: {key}")
            if value:
                values[key] = value
        return ProviderConfig(**values)


def _parse_yaml(path: Path) -> dict:
    """Parse a YAML file and return contents."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_provider_config(path: Optional[Path] = None) -> ProviderConfig:
    """Load provider settings from YAML.

    Args:
        path: Provider file. Default: $K8S_MANIFEST_CONFIG, else no file.

    Returns:
        ProviderConfig (defaults when no file is configured)

    Raises:
        ConfigError: File missing, not a mapping, unknown keys, or non-string values
    """
    if path is None:
        if env_path := os.environ.get('K8S_MANIFEST_CONFIG'):
            path = Path(env_path)
        else:
            return ProviderConfig()

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Provider config not found: {path}")

    try:
        data = _parse_yaml(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Provider config must be a mapping: {path}")

    known = {f.name for f in fields(ProviderConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown provider settings in {path}: {', '.join(unknown)}")

    values = {}
    for key, value in data.items():
        if value is None:
            continue
        if not isinstance(value, str):
            raise ConfigError(f"Provider setting '{key}' must be a string in {path}")
        values[key] = value
    return ProviderConfig(**values)


def get_state_dir(override: Optional[str] = None) -> Path:
    """Directory holding persisted resource state.

    Resolution order:
    1. Explicit override (--state-dir)
    2. $K8S_MANIFEST_STATE_DIR environment variable
    3. ./.states
    """
    if override:
        return Path(override)
    if env_path := os.environ.get('K8S_MANIFEST_STATE_DIR'):
        return Path(env_path)
    return Path.cwd() / '.states'
