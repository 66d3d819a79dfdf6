"""Configuration loading for docgauge."""

from __future__ import annotations

import logging
import sys
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, TextIO

from docgauge.errors import ConfigError
from docgauge.rules import get_rule_spec
from docgauge.rules.base import RuleConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".docgauge.toml", "docgauge.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEY = "docgauge"
ROOT_MARKERS = (".git", ".hg")

DEFAULT_THRESHOLD = 100
DEFAULT_PATH = ("src/**/*.py",)
DEFAULT_OUTPUT = "measurements/report.txt"
STDOUT_TARGET = "-"

KNOWN_KEYS = frozenset(
    {"threshold", "require_exact_threshold", "verbose", "path", "output", "rules"}
)
RULE_BASE_KEYS = frozenset({"enabled", "weight", "exclude"})


class ReportOutput:
    """Normalized report destination: a file path or an open text stream."""

    def __init__(self, target: Path | TextIO) -> None:
        self.target = target

    @classmethod
    def coerce(cls, value: ReportOutput | str | Path | TextIO) -> ReportOutput:
        if isinstance(value, ReportOutput):
            return value
        if isinstance(value, str):
            if value == STDOUT_TARGET:
                return cls(sys.stdout)
            return cls(Path(value))
        return cls(value)

    @property
    def is_stream(self) -> bool:
        return not isinstance(self.target, Path)

    def write(self, text: str) -> None:
        if isinstance(self.target, Path):
            self.target.parent.mkdir(parents=True, exist_ok=True)
            self.target.write_text(text, encoding="utf-8")
            return
        self.target.write(text)
        self.target.flush()

    def __str__(self) -> str:
        if isinstance(self.target, Path):
            return str(self.target)
        return getattr(self.target, "name", "<stream>")


class Config:
    """Resolved run configuration.

    ``threshold`` and ``output`` may be reassigned after construction; their
    setters only coerce the value. Every other field is read-only.
    """

    __slots__ = (
        "_threshold",
        "_require_exact_threshold",
        "_verbose",
        "_path",
        "_rules",
        "_output",
        "_source",
    )

    def __init__(
        self,
        *,
        threshold: int = DEFAULT_THRESHOLD,
        require_exact_threshold: bool = True,
        verbose: bool = True,
        path: list[str] | tuple[str, ...] = DEFAULT_PATH,
        rules: Mapping[str, RuleConfig] | None = None,
        output: ReportOutput | str | Path | TextIO = DEFAULT_OUTPUT,
        source: str | None = None,
    ) -> None:
        self._threshold = int(threshold)
        self._require_exact_threshold = require_exact_threshold
        self._verbose = verbose
        self._path = tuple(path)
        self._rules = dict(rules or {})
        self._output = ReportOutput.coerce(output)
        self._source = source

    @property
    def threshold(self) -> int:
        return self._threshold

    @threshold.setter
    def threshold(self, value: int | str) -> None:
        self._threshold = int(value)

    @property
    def output(self) -> ReportOutput:
        return self._output

    @output.setter
    def output(self, value: ReportOutput | str | Path | TextIO) -> None:
        self._output = ReportOutput.coerce(value)

    @property
    def require_exact_threshold(self) -> bool:
        return self._require_exact_threshold

    @property
    def verbose(self) -> bool:
        return self._verbose

    @property
    def path(self) -> list[str]:
        return list(self._path)

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def rules(self) -> dict[str, RuleConfig]:
        return dict(self._rules)

    def for_rule(self, rule_id: str) -> RuleConfig:
        """Return the rule's configuration, or defaults when it is unconfigured."""
        get_rule_spec(rule_id)
        return self._rules.get(rule_id, RuleConfig())

    def to_dict(self) -> dict[str, Any]:
        return {
            "threshold": self.threshold,
            "require_exact_threshold": self.require_exact_threshold,
            "verbose": self.verbose,
            "path": self.path,
            "output": str(self.output),
            "rules": {rule_id: item.to_dict() for rule_id, item in self._rules.items()},
            "source": self.source,
        }


def find_config_file(start: Path) -> Path | None:
    """Walk upward from ``start`` to the nearest config file.

    The walk stops at the first directory holding a repository marker such as
    ``.git``. Returns ``None`` when no config file is found.
    """
    current = start.resolve()
    for directory in (current, *current.parents):
        for filename in CONFIG_FILENAMES:
            candidate = directory / filename
            if candidate.is_file():
                logger.debug("Found config file %s", candidate)
                return candidate
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file() and _find_pyproject_tool_section(_load_toml(pyproject)) is not None:
            logger.debug("Found [tool.%s] in %s", PYPROJECT_TOOL_KEY, pyproject)
            return pyproject
        if any((directory / marker).exists() for marker in ROOT_MARKERS):
            break
    logger.debug("No config file found above %s", current)
    return None


def load_config(
    config_file: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Config:
    """Build a config from defaults, an optional config file, and explicit overrides.

    Later layers win per top-level key. The ``rules`` table is merged per rule
    identity, each rule's table replacing the earlier one wholesale.
    """
    layers: list[Mapping[str, Any]] = []
    source: str | None = None
    if config_file is not None:
        if not config_file.is_file():
            raise ConfigError(f"Config file does not exist: {config_file}")
        loaded = _load_toml(config_file)
        if config_file.name == PYPROJECT_FILENAME:
            layers.append(_find_pyproject_tool_section(loaded) or {})
        else:
            layers.append(loaded)
        source = str(config_file)
        logger.debug("Loaded config from %s", source)
    if overrides:
        layers.append(overrides)
    return _from_mapping(merge_layers(*layers), source=source)


def merge_layers(*layers: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for layer in layers:
        for key, value in layer.items():
            if key == "rules":
                rules = dict(_as_table(merged.get("rules"), "rules"))
                rules.update(_as_table(value, "rules"))
                merged["rules"] = rules
            else:
                merged[key] = value
    return merged


def default_config_template() -> str:
    """Return a starter config file."""
    return "\n".join(
        [
            "threshold = 100",
            "require_exact_threshold = true",
            "verbose = true",
            'path = ["src/**/*.py"]',
            f'output = "{DEFAULT_OUTPUT}"',
            "",
            '[rules."summary.length"]',
            "max_length = 79",
            "",
            '[rules."api_tag.presence"]',
            "enabled = false",
            "",
            '[rules."example_tag"]',
            "weight = 2",
            "skip_private = true",
            'exclude = ["mypackage.internal"]',
            "",
        ]
    )


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    return loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    section = tool.get(PYPROJECT_TOOL_KEY)
    return section if isinstance(section, dict) else None


def _from_mapping(mapping: Mapping[str, Any], *, source: str | None) -> Config:
    unknown = sorted(str(key) for key in mapping if key not in KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    threshold = _as_int(mapping.get("threshold", DEFAULT_THRESHOLD), "threshold")
    if not 0 <= threshold <= 100:
        raise ConfigError("threshold must be between 0 and 100")

    return Config(
        threshold=threshold,
        require_exact_threshold=_as_bool(
            mapping.get("require_exact_threshold", True), "require_exact_threshold"
        ),
        verbose=_as_bool(mapping.get("verbose", True), "verbose"),
        path=_as_path_list(mapping.get("path", list(DEFAULT_PATH))),
        rules=_parse_rules(_as_table(mapping.get("rules"), "rules")),
        output=_as_output(mapping.get("output", DEFAULT_OUTPUT)),
        source=source,
    )


def _parse_rules(value: Mapping[str, Any]) -> dict[str, RuleConfig]:
    parsed: dict[str, RuleConfig] = {}
    for rule_id, raw in value.items():
        spec = get_rule_spec(rule_id)
        field_name = f"rules.{rule_id}"
        table = _as_table(raw, field_name)

        weight = _as_int(table.get("weight", 1), f"{field_name}.weight")
        if weight < 0:
            raise ConfigError(f"{field_name}.weight must be non-negative")

        options: dict[str, Any] = {}
        for key, option_value in table.items():
            if key in RULE_BASE_KEYS:
                continue
            if key not in spec.option_defaults:
                allowed = ", ".join(sorted(RULE_BASE_KEYS | set(spec.option_defaults)))
                raise ConfigError(
                    f"Unknown option {field_name}.{key}. Expected one of: {allowed}"
                )
            options[key] = _as_option(
                option_value, spec.option_defaults[key], f"{field_name}.{key}"
            )

        parsed[rule_id] = RuleConfig(
            enabled=_as_bool(table.get("enabled", True), f"{field_name}.enabled"),
            weight=weight,
            exclude=tuple(_as_str_list(table.get("exclude"), f"{field_name}.exclude")),
            options=options,
        )
    return parsed


def _as_option(value: Any, default: Any, field_name: str) -> Any:
    if isinstance(default, bool):
        return _as_bool(value, field_name)
    if isinstance(default, int):
        return _as_int(value, field_name)
    if isinstance(default, str):
        return _as_str(value, field_name)
    return value


def _as_output(value: Any) -> ReportOutput | str:
    if isinstance(value, (str, ReportOutput)):
        return value
    if isinstance(value, Path):
        return ReportOutput(value)
    if hasattr(value, "write"):
        return ReportOutput(value)
    raise ConfigError("output must be a file path or '-' for stdout")


def _as_path_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    items = _as_str_list(value, "path")
    if not items:
        raise ConfigError("path must name at least one glob pattern")
    return items


def _as_table(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, tuple):
        value = list(value)
    if not isinstance(value, list):
        raise ConfigError(f"{field_name} must be a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"{field_name} must be a list of strings")
        items.append(item)
    return items


def _as_str(raw: Any, field_name: str) -> str:
    if not isinstance(raw, str):
        raise ConfigError(f"{field_name} must be a string")
    return raw


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ConfigError(f"{field_name} must be an integer")
    return raw


def _as_bool(raw: Any, field_name: str) -> bool:
    if not isinstance(raw, bool):
        raise ConfigError(f"{field_name} must be a boolean")
    return raw
