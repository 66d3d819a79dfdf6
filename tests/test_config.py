"""Tests for config discovery, merging and validation."""

from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest

from docgauge.config import (
    DEFAULT_OUTPUT,
    Config,
    ReportOutput,
    default_config_template,
    find_config_file,
    load_config,
)
from docgauge.errors import ConfigError, InvalidRuleError
from docgauge.rules.base import RuleConfig


def test_load_config_defaults_without_file() -> None:
    config = load_config(None)
    assert config.threshold == 100
    assert config.require_exact_threshold is True
    assert config.verbose is True
    assert config.path == ["src/**/*.py"]
    assert str(config.output) == DEFAULT_OUTPUT
    assert config.rules == {}
    assert config.source is None


def test_path_override_beats_file_which_beats_default(tmp_path: Path) -> None:
    config_file = _write(tmp_path / ".docgauge.toml", 'path = "lib/**/*.py"\nthreshold = 90')

    from_file = load_config(config_file)
    assert from_file.path == ["lib/**/*.py"]
    assert from_file.threshold == 90
    assert from_file.source == str(config_file)

    overridden = load_config(config_file, overrides={"path": ["app.py", "tools"]})
    assert overridden.path == ["app.py", "tools"]
    assert overridden.threshold == 90


def test_rule_tables_are_replaced_per_rule(tmp_path: Path) -> None:
    config_file = _write(
        tmp_path / ".docgauge.toml",
        "\n".join(
            [
                '[rules."summary.length"]',
                "max_length = 100",
                "weight = 2",
                "",
                '[rules."example_tag"]',
                "enabled = false",
            ]
        ),
    )

    config = load_config(
        config_file,
        overrides={"rules": {"summary.length": {"exclude": ["pkg.legacy"]}}},
    )

    assert config.for_rule("summary.length") == RuleConfig(exclude=("pkg.legacy",))
    assert config.for_rule("example_tag") == RuleConfig(enabled=False)
    assert config.for_rule("summary.presence") == RuleConfig()


def test_rule_options_are_parsed(tmp_path: Path) -> None:
    config_file = _write(
        tmp_path / ".docgauge.toml",
        "\n".join(
            [
                '[rules."summary.length"]',
                "max_length = 100",
                "weight = 2",
                'exclude = ["pkg.vendor"]',
            ]
        ),
    )
    rule_config = load_config(config_file).for_rule("summary.length")
    assert rule_config.enabled is True
    assert rule_config.weight == 2
    assert rule_config.exclude == ("pkg.vendor",)
    assert rule_config.options == {"max_length": 100}


def test_unknown_rule_identity_fails_fast(tmp_path: Path) -> None:
    config_file = _write(tmp_path / ".docgauge.toml", '[rules."summary.colour"]\nenabled = true')
    with pytest.raises(InvalidRuleError, match="summary.colour"):
        load_config(config_file)


def test_for_rule_rejects_unregistered_identity() -> None:
    with pytest.raises(InvalidRuleError, match="Unknown rule 'nope'"):
        Config().for_rule("nope")


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("colour = 1", "Unknown config keys: colour"),
        ("threshold = 101", "threshold must be between 0 and 100"),
        ('threshold = "high"', "threshold must be an integer"),
        ('verbose = "yes"', "verbose must be a boolean"),
        ("path = []", "path must name at least one glob pattern"),
        ('[rules."summary.length"]\nmaximum = 3', "Unknown option rules.summary.length.maximum"),
        ('[rules."summary.length"]\nmax_length = "long"', "max_length must be an integer"),
        ('[rules."summary.presence"]\nweight = -1', "weight must be non-negative"),
        ('rules = ["summary.presence"]', "rules must be a table/object"),
        ("threshold = = 3", "Invalid TOML"),
    ],
)
def test_invalid_config_is_rejected(tmp_path: Path, content: str, message: str) -> None:
    config_file = _write(tmp_path / ".docgauge.toml", content)
    with pytest.raises(ConfigError, match=message):
        load_config(config_file)


def test_missing_explicit_config_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="does not exist"):
        load_config(tmp_path / "missing.toml")


def test_find_config_file_walks_up_to_nearest_file(tmp_path: Path) -> None:
    root = tmp_path / "project"
    nested = root / "src" / "pkg"
    nested.mkdir(parents=True)
    (root / ".git").mkdir()
    config_file = _write(root / ".docgauge.toml", "threshold = 80")

    assert find_config_file(nested) == config_file.resolve()


def test_find_config_file_stops_at_repository_root(tmp_path: Path) -> None:
    _write(tmp_path / ".docgauge.toml", "threshold = 80")
    root = tmp_path / "project"
    nested = root / "src"
    nested.mkdir(parents=True)
    (root / ".git").mkdir()

    assert find_config_file(nested) is None


def test_find_config_file_reads_pyproject_tool_table(tmp_path: Path) -> None:
    pyproject = _write(
        tmp_path / "pyproject.toml",
        "\n".join(["[project]", 'name = "demo"', "", "[tool.docgauge]", "threshold = 70"]),
    )
    (tmp_path / ".git").mkdir()

    assert find_config_file(tmp_path) == pyproject.resolve()
    config = load_config(pyproject)
    assert config.threshold == 70
    assert config.source == str(pyproject)


def test_find_config_file_ignores_pyproject_without_tool_table(tmp_path: Path) -> None:
    _write(tmp_path / "pyproject.toml", '[project]\nname = "demo"')
    (tmp_path / ".git").mkdir()
    assert find_config_file(tmp_path) is None


def test_threshold_and_output_setters_coerce(tmp_path: Path) -> None:
    config = Config()
    config.threshold = "95"  # type: ignore[assignment]
    assert config.threshold == 95

    config.output = str(tmp_path / "out" / "report.txt")
    assert isinstance(config.output, ReportOutput)
    assert config.output.target == tmp_path / "out" / "report.txt"

    config.output = "-"
    assert config.output.target is sys.stdout

    with pytest.raises(AttributeError):
        config.verbose = False  # type: ignore[misc]


def test_report_output_writes_files_and_streams(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "report.txt"
    ReportOutput.coerce(target).write("hello\n")
    assert target.read_text(encoding="utf-8") == "hello\n"

    stream = io.StringIO()
    output = ReportOutput.coerce(stream)
    output.write("hello\n")
    assert stream.getvalue() == "hello\n"
    assert output.is_stream


def test_default_config_template_is_loadable(tmp_path: Path) -> None:
    config_file = _write(tmp_path / "docgauge.toml", default_config_template())
    config = load_config(config_file)
    assert config.for_rule("api_tag.presence").enabled is False
    assert config.for_rule("example_tag").weight == 2


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content + "\n", encoding="utf-8")
    return path
