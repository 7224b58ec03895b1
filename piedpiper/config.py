# piedpiper/config.py

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from jsonschema import Draft202012Validator

from piedpiper.errors import ConfigLoadError

logger = logging.getLogger(__name__)


# -------------------------
# Configuration
# -------------------------

SCHEMA_PATH = Path(__file__).parent / "schemas" / "config.schema.json"

CONFIG_FILENAMES = (".piedpiper.json", ".piedpiper.yaml", ".piedpiper.yml")

# camelCase keys as they appear in the config file -> Config attribute names
FIELD_MAP = {
    "targetFolder": "target_folder",
    "ignoredFolders": "ignored_folders",
    "ignoredFiles": "ignored_files",
    "ignoredPatterns": "ignored_patterns",
    "extensionsToAppendTxt": "extensions_to_append_txt",
    "legacyPrefixMatch": "legacy_prefix_match",
}


def _dotted(ext: str) -> str:
    return ext if ext.startswith(".") else "." + ext


@dataclass(frozen=True)
class Config:
    target_folder: str = "pipe"
    ignored_folders: tuple = ("node_modules", "pipe", ".git", "dist")
    ignored_files: tuple = (
        "package-lock.json",
        "organize.js",
        ".gitignore",
        ".prettierrc",
        ".env",
        "README.md",
        ".firebaserc",
    )
    ignored_patterns: tuple = ("*.log", "*.cache", "*.svg")
    extensions_to_append_txt: tuple = (".rules", ".jsx")
    legacy_prefix_match: bool = False

    def merged(self, override: Dict[str, Any]) -> "Config":
        """
        Shallow merge: every key present in `override` replaces the whole
        field, lists are never unioned with the defaults.
        """
        changes: Dict[str, Any] = {}
        for key, value in override.items():
            attr = FIELD_MAP.get(key)
            if attr is None:
                raise ConfigLoadError(f"Unknown config key: {key}")
            if isinstance(value, list):
                value = tuple(value)
            if attr == "extensions_to_append_txt":
                value = tuple(_dotted(ext) for ext in value)
            changes[attr] = value
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        out = {}
        for key, attr in FIELD_MAP.items():
            value = getattr(self, attr)
            out[key] = list(value) if isinstance(value, tuple) else value
        return out


DEFAULT_CONFIG = Config()


# -------------------------
# Helpers
# -------------------------

def load_schema() -> Dict[str, Any]:
    with SCHEMA_PATH.open() as f:
        return json.load(f)


def schema_errors(data: Any, schema: Optional[Dict[str, Any]] = None) -> List[str]:
    """Return one readable line per schema violation, empty when valid."""
    validator = Draft202012Validator(schema or load_schema())
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    return [f"{list(err.path)}: {err.message}" for err in errors]


def parse_config_file(path: Path) -> Any:
    """Read a JSON or YAML config file without validating it."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigLoadError(f"Cannot read {path}: {e}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
            if data is None:
                data = {}
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigLoadError(f"Cannot parse {path}: {e}") from e

    return data


def read_config_file(path: Path) -> Dict[str, Any]:
    """
    Parse and validate a config override file.
    Raises ConfigLoadError for anything that stops the file being usable.
    """
    data = parse_config_file(path)
    problems = schema_errors(data)
    if problems:
        raise ConfigLoadError(f"Invalid config {path}: " + "; ".join(problems))

    return data


def find_config_file(cwd: Path) -> Optional[Path]:
    for name in CONFIG_FILENAMES:
        candidate = cwd / name
        if candidate.is_file():
            return candidate
    return None


def load_config(cwd: Path, path: Optional[Path] = None) -> Config:
    """
    Build the run configuration from the defaults and an optional override
    file. A broken override is reported and the defaults are used instead.
    """
    cwd = Path(cwd)
    if path is None:
        path = find_config_file(cwd)
        if path is None:
            logger.debug("No config file in %s, using defaults", cwd)
            return DEFAULT_CONFIG
    else:
        path = Path(path)
        if not path.is_absolute():
            path = cwd / path

    try:
        override = read_config_file(path)
    except ConfigLoadError as e:
        logger.warning("Error loading config: %s", e)
        logger.warning("Using default configuration")
        return DEFAULT_CONFIG

    logger.info("Loaded configuration from %s", path.name)
    return DEFAULT_CONFIG.merged(override)
