"""Docstring parser primitives.

Docstrings are split into prose text and structured tags. Tags use reST field
lists::

    :param name: description
    :param int name: description with inline type
    :type name: int
    :returns: description
    :rtype: int
    :raises ValueError: description
    :api: public
    :see: other.function

A doctest prompt (``>>>``) or an ``Example:``/``Examples:`` heading also
counts as an ``example`` tag, and the lines stay part of the prose text.
"""

from __future__ import annotations

from dataclasses import dataclass
from re import compile

from docgauge.document import Tag

FIELD_RE = compile(r"^:(?P<field>[A-Za-z_]+)(?:\s+(?P<args>[^:]+?))?\s*:(?:\s+(?P<body>.*))?$")
EXAMPLE_HEADING_RE = compile(r"^Examples?\s*::?\s*$")

_FIELD_ALIASES = {
    "param": "param",
    "parameter": "param",
    "arg": "param",
    "argument": "param",
    "key": "param",
    "keyword": "param",
    "type": "type",
    "return": "return",
    "returns": "return",
    "rtype": "rtype",
    "raise": "raises",
    "raises": "raises",
    "except": "raises",
    "exception": "raises",
    "api": "api",
    "see": "see",
    "seealso": "see",
    "example": "example",
    "examples": "example",
}


@dataclass(slots=True)
class ParsedDocstring:
    """Prose text and tags extracted from one docstring."""

    text: str
    tags: tuple[Tag, ...]


@dataclass(slots=True)
class _FieldDraft:
    name: str
    args: str
    body: list[str]


def parse_docstring(raw: str | None) -> ParsedDocstring:
    """Split a cleaned docstring into prose text and tags."""
    if not raw:
        return ParsedDocstring(text="", tags=())

    text_lines: list[str] = []
    drafts: list[_FieldDraft] = []
    current: _FieldDraft | None = None
    saw_example = False

    for line in raw.splitlines():
        match = FIELD_RE.match(line.strip()) if not line.startswith((" ", "\t")) else None
        if match is not None:
            current = _FieldDraft(
                name=match.group("field").lower(),
                args=(match.group("args") or "").strip(),
                body=[match.group("body") or ""],
            )
            drafts.append(current)
            continue

        if current is not None and line.strip() and line[:1] in {" ", "\t"}:
            current.body.append(line.strip())
            continue

        current = None
        stripped = line.strip()
        if stripped.startswith(">>>") or EXAMPLE_HEADING_RE.match(stripped):
            saw_example = True
        text_lines.append(line)

    tags = [_draft_to_tag(draft) for draft in drafts]
    if saw_example and not any(tag.name == "example" for tag in tags):
        tags.append(Tag(name="example"))

    return ParsedDocstring(text="\n".join(text_lines).rstrip(), tags=tuple(tags))


def _draft_to_tag(draft: _FieldDraft) -> Tag:
    name = _FIELD_ALIASES.get(draft.name, draft.name)
    text = " ".join(part for part in draft.body if part).strip()

    if name == "param":
        words = draft.args.split()
        if len(words) >= 2:
            return Tag(name=name, text=text, param=words[-1], types=(" ".join(words[:-1]),))
        return Tag(name=name, text=text, param=words[0] if words else None)
    if name in {"type", "raises"}:
        return Tag(name=name, text=text, param=draft.args or None)
    if name == "rtype":
        return Tag(name=name, text=text, types=(text,) if text else ())
    if name == "api":
        return Tag(name=name, text=text or draft.args)
    return Tag(name=name, text=text)
