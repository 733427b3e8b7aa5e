"""Discovery and parsing of ``{{#...}}`` helper directives in chapter text."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

log = logging.getLogger(__name__)

ESCAPE_CHAR = "\\"

_USIZE_MAX = 2**64 - 1
_USIZE_RE = re.compile(r"\+?[0-9]+")

_LINK_RE = re.compile(
    r"""
    \\\{\{\#.*\}\}      # escaped link
    |
    \{\{\s*             # opening braces and whitespace
    \#([a-zA-Z0-9_]+)   # link type
    \s+                 # separating whitespace
    ([^}]+)             # target path and space separated properties
    \}\}                # closing braces
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class LineRange:
    """A half-open range of zero-based line numbers; ``None`` means unbounded."""

    start: Optional[int] = None
    end: Optional[int] = None


@dataclass(frozen=True)
class Anchor:
    """A named anchor delimiting the lines to include."""

    name: str


RangeOrAnchor = Union[LineRange, Anchor]


@dataclass(frozen=True)
class Escaped:
    """An escaped directive, rendered literally without its backslash."""


@dataclass(frozen=True)
class Include:
    """``{{#include path[:range|:anchor]}}``."""

    path: str
    spec: RangeOrAnchor


@dataclass(frozen=True)
class Playground:
    """``{{#playground path attrs...}}``."""

    path: str
    attrs: tuple[str, ...] = ()


@dataclass(frozen=True)
class RustdocInclude:
    """``{{#rustdoc_include path[:range|:anchor]}}``."""

    path: str
    spec: RangeOrAnchor


@dataclass(frozen=True)
class Title:
    """``{{#title text}}``: overrides the page title."""

    title: str


LinkKind = Union[Escaped, Include, Playground, RustdocInclude, Title]


@dataclass(frozen=True)
class Link:
    """A directive found in a text, with its position and raw text."""

    start_index: int
    end_index: int
    kind: LinkKind
    text: str


def _parse_usize(text: str) -> Optional[int]:
    if not _USIZE_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _USIZE_MAX else None


def parse_range_or_anchor(parts: Optional[str]) -> RangeOrAnchor:
    """Parse the part after the first colon of an include target."""
    pieces = (parts or "").split(":", 2)
    first = pieces[0]

    value = _parse_usize(first)
    if value is not None:
        # line numbers are one-based in directives
        start: Optional[int] = max(value - 1, 0)
    elif first == "":
        start = None
    else:
        return Anchor(first)

    end_text = pieces[1] if len(pieces) > 1 else None
    end = _parse_usize(end_text) if end_text is not None else None

    if start is not None:
        if end_text is None:
            return LineRange(start, start + 1)
        return LineRange(start, end)
    return LineRange(None, end)


def _split_target(path: str) -> tuple[str, RangeOrAnchor]:
    file_part, sep, rest = path.partition(":")
    return file_part, parse_range_or_anchor(rest if sep else None)


def parse_include_path(path: str) -> Include:
    """Parse the target of an ``include`` directive."""
    return Include(*_split_target(path))


def parse_rustdoc_include_path(path: str) -> RustdocInclude:
    """Parse the target of a ``rustdoc_include`` directive."""
    return RustdocInclude(*_split_target(path))


def link_base_dir(kind: LinkKind, base: Union[str, Path]) -> Optional[Path]:
    """Directory that nested directives of an included file resolve against."""
    if isinstance(kind, (Include, Playground, RustdocInclude)):
        return (Path(base) / kind.path).parent
    return None


def _kind_from_match(match: re.Match[str]) -> Optional[LinkKind]:
    typ, rest = match.group(1), match.group(2)
    if typ is not None and rest is not None:
        if typ == "title":
            return Title(rest)
        words = rest.split()
        if not words:
            return None
        target, props = words[0], tuple(words[1:])
        if typ == "include":
            return parse_include_path(target)
        if typ == "playground":
            return Playground(target, props)
        if typ == "playpen":
            log.warning(
                "the {{#playpen}} expression has been renamed to {{#playground}}, "
                "please update your book to use the new name"
            )
            return Playground(target, props)
        if typ == "rustdoc_include":
            return parse_rustdoc_include_path(target)
        return None
    if match.group(0).startswith(ESCAPE_CHAR):
        return Escaped()
    return None


def find_links(contents: str) -> Iterator[Link]:
    """Yield every recognised directive in ``contents`` in order."""
    for match in _LINK_RE.finditer(contents):
        kind = _kind_from_match(match)
        if kind is not None:
            yield Link(match.start(), match.end(), kind, match.group(0))