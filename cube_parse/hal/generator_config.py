import os
import json
import yaml
from logging import Logger
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional


@dataclass
class GeneratorOptions:
    """Rendering options, loaded from the `generator_config` section of a YAML or JSON file."""
    line_width: int = 80
    mcu_flag_prefix: str = "mcu-"
    io_flag_prefix: str = "io-"
    package_flag_prefix: str = "package-"
    family_flags: bool = False
    package_flags: bool = False
    group_variants: bool = True
    stems: Optional[List[str]] = None

    def mcu_flag(self, mcu: str) -> str:
        return f"{self.mcu_flag_prefix}{mcu}"

    def io_flag(self, revision_group: str) -> str:
        return f"{self.io_flag_prefix}{revision_group}"

    def package_flag(self, package: str) -> str:
        return f"{self.package_flag_prefix}{package}"


def _read_config_file(file_path: str) -> Any:
    """
    Parses a file path and returns its content.
    Supports .json, .yaml, and .yml extensions.
    """
    _, ext = os.path.splitext(file_path.lower())
    with open(file_path, 'r', encoding='utf-8') as file:
        if ext == '.json':
            return json.load(file)
        if ext in ['.yaml', '.yml']:
            return yaml.safe_load(file)
        # Attempt to guess format if extension is non-standard
        content = file.read()
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            return yaml.safe_load(content)


def options_from_dict(data: Dict[str, Any], log: Logger) -> GeneratorOptions:
    known = {f.name for f in fields(GeneratorOptions)}
    values = {}
    for key, value in data.items():
        if key not in known:
            log.warning("Ignoring unknown generator option %s", key, extra={"option": key})
            continue
        values[key] = value
    if values.get("stems") is not None:
        values["stems"] = [str(s) for s in values["stems"]]
    return GeneratorOptions(**values)


def load_generator_options(file_path: Optional[str], log: Logger, **overrides) -> GeneratorOptions:
    """
    Loads generator options from an optional config file, then applies non-None overrides
    (typically command line arguments).
    """
    data: Dict[str, Any] = {}
    if file_path:
        try:
            content = _read_config_file(file_path)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            log.error("Parsing error: %s", e, extra={"path": file_path})
            raise ValueError(f"Could not read generator configuration {file_path}: {e}") from e
        if content is None:
            content = {}
        if not isinstance(content, dict):
            raise ValueError(f"File content is {type(content)}, expected dict.")
        data = content.get("generator_config", {}) or {}
        if not isinstance(data, dict):
            raise ValueError(f"generator_config is {type(data)}, expected dict.")
        log.info("Generator configuration loaded", extra={"path": file_path, "count": len(data)})

    data.update({k: v for k, v in overrides.items() if v is not None})
    options = options_from_dict(data, log)
    log.debug("Generator options: %s", options)
    return options
