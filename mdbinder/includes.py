"""Expansion of ``{{#...}}`` helper directives into chapter content."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Union

from mdbinder.links import (
    Anchor,
    Escaped,
    Include,
    LineRange,
    Link,
    Playground,
    RangeOrAnchor,
    RustdocInclude,
    Title,
    find_links,
    link_base_dir,
)

log = logging.getLogger(__name__)

MAX_LINK_NESTED_DEPTH = 10

_ANCHOR_START = re.compile(r"ANCHOR:\s*(?P<anchor_name>[\w_-]+)")
_ANCHOR_END = re.compile(r"ANCHOR_END:\s*(?P<anchor_name>[\w_-]+)")

PathLike = Union[str, Path]


def _lines(s: str) -> list[str]:
    if not s:
        return []
    parts = s.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def _in_range(index: int, spec: LineRange) -> bool:
    if spec.start is not None and index < spec.start:
        return False
    return spec.end is None or index < spec.end


def _take_lines(s: str, spec: LineRange) -> str:
    start = spec.start or 0
    lines = _lines(s)[start:]
    if spec.end is not None:
        lines = lines[: max(spec.end - start, 0)]
    return "\n".join(lines)


def _take_anchored_lines(s: str, anchor: str) -> str:
    retained: list[str] = []
    inside = False
    for line in _lines(s):
        if inside:
            end = _ANCHOR_END.search(line)
            if end is not None:
                if end["anchor_name"] == anchor:
                    break
            elif not _ANCHOR_START.search(line):
                retained.append(line)
        else:
            start = _ANCHOR_START.search(line)
            if start is not None and start["anchor_name"] == anchor:
                inside = True
    return "\n".join(retained)


def _take_rustdoc_include_lines(s: str, spec: LineRange) -> str:
    return "\n".join(
        line if _in_range(index, spec) else f"# {line}"
        for index, line in enumerate(_lines(s))
    )


def _take_rustdoc_include_anchored_lines(s: str, anchor: str) -> str:
    output: list[str] = []
    inside = False
    for line in _lines(s):
        start = _ANCHOR_START.search(line)
        if start is not None:
            if start["anchor_name"] == anchor:
                inside = True
            continue
        end = _ANCHOR_END.search(line)
        if end is not None:
            if end["anchor_name"] == anchor:
                inside = False
            continue
        output.append(line if inside else f"# {line}")
    return "\n".join(output)


def _read_target(link: Link, target: Path) -> str:
    try:
        return target.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise OSError(f"Could not read file for link {link.text} ({target})") from exc


def _select(content: str, spec: RangeOrAnchor, rustdoc: bool) -> str:
    if isinstance(spec, Anchor):
        if rustdoc:
            return _take_rustdoc_include_anchored_lines(content, spec.name)
        return _take_anchored_lines(content, spec.name)
    if rustdoc:
        return _take_rustdoc_include_lines(content, spec)
    return _take_lines(content, spec)


def render_link(link: Link, base: PathLike, chapter_title: str) -> tuple[str, str]:
    """Render one directive relative to ``base``.

    Returns the replacement text and the (possibly overridden) chapter title.
    Raises ``OSError`` when a referenced file cannot be read.
    """
    kind = link.kind
    base = Path(base)
    if isinstance(kind, Escaped):
        return link.text[1:], chapter_title
    if isinstance(kind, Title):
        return "", kind.title
    if isinstance(kind, (Include, RustdocInclude)):
        content = _read_target(link, base / kind.path)
        return _select(content, kind.spec, isinstance(kind, RustdocInclude)), chapter_title
    if isinstance(kind, Playground):
        contents = _read_target(link, base / kind.path)
        ftype = "rust," if kind.attrs else "rust"
        if not contents.endswith("\n"):
            contents += "\n"
        return f"```{ftype}{','.join(kind.attrs)}\n{contents}```\n", chapter_title
    raise TypeError(f"unknown link kind: {kind!r}")


def replace_all(
    s: str,
    path: PathLike,
    source: PathLike,
    depth: int = 0,
    chapter_title: str = "",
) -> tuple[str, str]:
    """Expand every directive in ``s``, following nested includes.

    Returns the expanded text and the resulting chapter title. Directives that
    fail to render are logged and left in the text untouched.
    """
    previous_end = 0
    pieces: list[str] = []

    for link in find_links(s):
        pieces.append(s[previous_end:link.start_index])
        try:
            new_content, chapter_title = render_link(link, path, chapter_title)
        except OSError as exc:
            log.error('Error updating "%s", %s', link.text, exc)
            if exc.__cause__ is not None:
                log.warning("Caused By: %s", exc.__cause__)
            previous_end = link.start_index
            continue

        if depth < MAX_LINK_NESTED_DEPTH:
            nested_base = link_base_dir(link.kind, path)
            if nested_base is not None:
                new_content, chapter_title = replace_all(
                    new_content, nested_base, source, depth + 1, chapter_title
                )
            pieces.append(new_content)
        else:
            log.error(
                "Stack depth exceeded in %s. Check for cyclic includes", source
            )
        previous_end = link.end_index

    pieces.append(s[previous_end:])
    return "".join(pieces), chapter_title