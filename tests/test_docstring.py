"""Tests for docstring field parsing."""

from __future__ import annotations

from docgauge.docstring import parse_docstring
from docgauge.document import Tag


def test_parse_docstring_separates_fields_from_text() -> None:
    parsed = parse_docstring(
        "\n".join(
            [
                "Fetch a record.",
                "",
                "Longer description.",
                "",
                ":param key: the record key",
                "    spanning two lines",
                ":param int retries: retry budget",
                ":type key: str",
                ":returns: the record",
                ":rtype: dict",
                ":raises KeyError: when missing",
                ":api: public",
            ]
        )
    )

    assert parsed.text == "Fetch a record.\n\nLonger description."
    assert parsed.tags == (
        Tag(name="param", text="the record key spanning two lines", param="key"),
        Tag(name="param", text="retry budget", param="retries", types=("int",)),
        Tag(name="type", text="str", param="key"),
        Tag(name="return", text="the record"),
        Tag(name="rtype", text="dict", types=("dict",)),
        Tag(name="raises", text="when missing", param="KeyError"),
        Tag(name="api", text="public"),
    )


def test_parse_docstring_detects_doctest_examples() -> None:
    parsed = parse_docstring("Add numbers.\n\n>>> add(1, 2)\n3")
    assert parsed.text == "Add numbers.\n\n>>> add(1, 2)\n3"
    assert parsed.tags == (Tag(name="example"),)


def test_parse_docstring_detects_example_heading_once() -> None:
    parsed = parse_docstring("Add numbers.\n\nExample::\n\n    add(1, 2)\n\n:example: add(2, 2)")
    assert [tag.name for tag in parsed.tags] == ["example"]
    assert parsed.tags[0].text == "add(2, 2)"


def test_parse_docstring_keeps_inline_roles_in_text() -> None:
    parsed = parse_docstring(":math:`x` is squared here.")
    assert parsed.text == ":math:`x` is squared here."
    assert parsed.tags == ()


def test_parse_docstring_handles_missing_docstring() -> None:
    parsed = parse_docstring(None)
    assert parsed.text == ""
    assert parsed.tags == ()
