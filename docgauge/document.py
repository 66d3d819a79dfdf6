"""Documented entity model."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

_PARAGRAPH_BREAK = re.compile(r"\r?\n[ \t]*\r?\n")


class EntityKind(str, Enum):
    """Kinds of documentable code entities."""

    MODULE = "module"
    CLASS = "class"
    METHOD = "method"
    ATTRIBUTE = "attribute"
    CONSTANT = "constant"


class Visibility(str, Enum):
    """Entity visibility derived from naming at extraction time."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


@dataclass(frozen=True, slots=True)
class Location:
    """Source position of an entity."""

    path: str
    line: int

    def __str__(self) -> str:
        return f"{self.path}:{self.line}"


@dataclass(frozen=True, slots=True)
class Tag:
    """A structured docstring tag such as ``:param name:`` or ``:api: public``."""

    name: str
    text: str = ""
    param: str | None = None
    types: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Signature:
    """Callable shape used by tag rules.

    ``parameters`` excludes implicit receivers (``self``/``cls``).
    ``returns_value`` is true when the callable is annotated with a non-None
    return type or contains a ``return <value>`` statement.
    """

    parameters: tuple[str, ...] = ()
    returns_value: bool = False


@dataclass(frozen=True, slots=True)
class Document:
    """One extracted entity together with its parsed docstring."""

    identifier: str
    kind: EntityKind
    visibility: Visibility = Visibility.PUBLIC
    docstring: str = ""
    tags: tuple[Tag, ...] = ()
    location: Location = Location("<unknown>", 0)
    signature: Signature | None = None

    @property
    def summary_text(self) -> str:
        """Return the first paragraph of the docstring, trimmed."""
        return summary_text(self.docstring)

    @property
    def api(self) -> str | None:
        """Return the value of the ``api`` tag, if any."""
        for tag in self.tags:
            if tag.name == "api":
                return tag.text.strip()
        return None

    def has_tag(self, name: str) -> bool:
        return any(tag.name == name for tag in self.tags)

    def tags_named(self, *names: str) -> list[Tag]:
        return [tag for tag in self.tags if tag.name in names]


def summary_text(docstring: str) -> str:
    """Return the text up to the first blank line, stripped.

    A docstring that opens with a blank line has no summary.
    """
    if not docstring:
        return ""
    return _PARAGRAPH_BREAK.split(docstring, maxsplit=1)[0].strip()
