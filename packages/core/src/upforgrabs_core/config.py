from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "projects_dir": "_data/projects",
    "allowed_extensions": [".yml"],
    "schema": None,  # None = use the bundled schema; set to a path string to override
    "max_workers": 4,
    "request_timeout": 15,  # seconds per GitHub API request
    "batch_timeout": 120,  # seconds before remaining remote checks are treated as inconclusive
    "share_rate_limit": True,  # one exhausted check marks every later check in the run inconclusive
}

BUILTIN_SCHEMA_DIR = Path(__file__).parent / "schema"
_BUILTIN_SCHEMA = BUILTIN_SCHEMA_DIR / "project.schema.json"


def load_config(config_path: str = ".upforgrabs.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .upforgrabs.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "allowed_extensions": list(DEFAULT_CONFIG["allowed_extensions"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    return config


def resolve_schema_path(config: dict) -> Path:
    """
    Return the JSON schema used to validate project files.

    If ``schema`` is set in config, uses that path (relative to cwd).
    Otherwise falls back to the bundled schema.
    """
    custom_path = config.get("schema")
    if custom_path:
        p = Path(custom_path)
        if not p.exists():
            raise FileNotFoundError(f"Schema file not found: {custom_path}")
        return p

    if _BUILTIN_SCHEMA.exists():
        return _BUILTIN_SCHEMA

    raise FileNotFoundError("No schema configured and the bundled schema is missing.")
