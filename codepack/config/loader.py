# codepack/config/loader.py
"""
Handles loading and merging of configuration from TOML files.
"""
import toml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import fields as dataclass_fields, MISSING
import structlog

from codepack.exceptions import ConfigError

from .settings import PackConfig, IgnoreErrorPolicy

log = structlog.get_logger(__name__)

PROJECT_CONFIG_FILENAMES = [".codepack.toml", "codepack.toml", "pyproject.toml"]
USER_CONFIG_DIR = Path.home() / ".config" / "codepack"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.toml"

CONFIG_KEY_TO_PACKCONFIG_ATTR_MAP: Dict[str, str] = {
    "indir": "input_dir",
    "outfile": "output_file",
    "force": "force",
    "verbose": "verbose",
    "exclude_patterns": "exclude_patterns",
    "no_ignore": "no_ignore",
    "ignore_errors": "ignore_error_policy",
    "ignore_file_name": "ignore_file_name",
    "repo_marker_name": "repo_marker_name",
    "default_excludes": "default_excludes",
    "console_show_summary": "console_show_summary",
}

BOOL_OPTIONS = ("force", "verbose", "no_ignore", "console_show_summary")
STR_OPTIONS = ("ignore_file_name", "repo_marker_name")

def _load_toml_file_data(file_path: Path) -> Dict[str, Any]:
    if not file_path.is_file(): return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ConfigError(f"Could not read config file {file_path}: {e}")
    return data.get("tool", {}).get("codepack", {}) if file_path.name == "pyproject.toml" else data

def load_and_merge_configs(project_dir: Optional[Path] = None) -> Dict[str, Any]:
    # user-level config first, then the first project config found in project_dir (cwd by default).
    merged_toml_data: Dict[str, Any] = {}
    if USER_CONFIG_FILE.is_file():
        log.info("loading_user_global_config", path=str(USER_CONFIG_FILE))
        merged_toml_data.update(_load_toml_file_data(USER_CONFIG_FILE))

    search_dir = project_dir if project_dir is not None else Path.cwd()
    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = search_dir / filename
        if candidate.is_file():
            project_settings = _load_toml_file_data(candidate)
            if project_settings:
                log.info("loading_project_local_config", path=str(candidate))
                user_profiles = merged_toml_data.get("profiles", {})
                project_profiles = project_settings.pop("profiles", {})
                if isinstance(user_profiles, dict) and isinstance(project_profiles, dict):
                    user_profiles.update(project_profiles)
                    merged_toml_data["profiles"] = user_profiles
                elif isinstance(project_profiles, dict):
                    merged_toml_data["profiles"] = project_profiles
                merged_toml_data.update(project_settings)
                break
    if not merged_toml_data: log.debug("no_configuration_files_loaded")
    return merged_toml_data

def _coerce_option(attr: str, value: Any) -> Any:
    # turns raw TOML values into the types PackConfig expects.
    if attr in ("input_dir", "output_file"):
        if not isinstance(value, str):
            raise ConfigError(f"'{attr}' must be a string path, got {value!r}")
        if attr == "input_dir":
            return Path(value or ".")
        return Path(value) if value else None
    if attr == "ignore_error_policy":
        policy = IgnoreErrorPolicy.from_string(value) if isinstance(value, str) else None
        if policy is None:
            raise ConfigError(f"invalid ignore_errors value: {value!r}")
        return policy
    if attr in ("exclude_patterns", "default_excludes"):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"'{attr}' must be a list of strings, got {value!r}")
        return list(value)
    if attr in BOOL_OPTIONS and not isinstance(value, bool):
        raise ConfigError(f"'{attr}' must be true or false, got {value!r}")
    if attr in STR_OPTIONS and (not isinstance(value, str) or not value):
        raise ConfigError(f"'{attr}' must be a non-empty string, got {value!r}")
    return value

def config_defaults() -> Dict[str, Any]:
    defaults: Dict[str, Any] = {}
    for fd in dataclass_fields(PackConfig):
        if fd.init:
            defaults[fd.name] = fd.default_factory() if fd.default_factory is not MISSING else fd.default
    return defaults

def build_effective_options(raw_configs: Dict[str, Any], profile_name: Optional[str] = None) -> Dict[str, Any]:
    """
    Layers dataclass defaults, top-level config keys and an optional profile.

    Returns a dict of PackConfig constructor arguments; command-line values
    are layered on top by the caller.
    """
    effective_options = config_defaults()
    layers = [raw_configs]
    if profile_name:
        profiles = raw_configs.get("profiles", {})
        if not isinstance(profiles, dict):
            raise ConfigError(f"'profiles' must be a table, got {profiles!r}")
        profile_values = profiles.get(profile_name, {})
        if not isinstance(profile_values, dict):
            raise ConfigError(f"Profile '{profile_name}' must be a table, got {profile_values!r}")
        if profile_values:
            log.info("applying_profile_settings", profile=profile_name)
            layers.append(profile_values)
        else:
            raise ConfigError(f"Profile '{profile_name}' not found in config files.")

    for layer in layers:
        for toml_k, pc_attr in CONFIG_KEY_TO_PACKCONFIG_ATTR_MAP.items():
            if toml_k in layer:
                effective_options[pc_attr] = _coerce_option(pc_attr, layer[toml_k])
    return effective_options
