"""Hiding of "boring" lines in code blocks and the full HTML post-processing pass."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

from mdbinder.headers import (
    CODE_BLOCK_RE,
    PlaygroundConfig,
    RustEdition,
    add_playground_pre,
    build_header_links,
    fix_code_blocks,
)

_LANGUAGE_RE = re.compile(r"\blanguage-(\w+)\b")
_HIDELINES_RE = re.compile(r"\bhidelines=(\S+)")
_BORING_LINE_RE = re.compile(r"(\s*)#(.?)(.*)")

_BORING_OPEN = '<span class="boring">'
_BORING_CLOSE = "</span>"


@dataclass(frozen=True)
class CodeConfig:
    """Code block settings: per-language prefixes that mark hidden lines."""

    hidelines: Mapping[str, str] = field(default_factory=dict)


def _lines(s: str) -> list[str]:
    if not s:
        return []
    parts = s.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def hide_lines_rust(content: str) -> str:
    """Wrap lines starting with ``# `` in a boring span and unescape ``##``."""
    lines = _lines(content)
    pieces: list[str] = []
    last = len(lines) - 1
    for position, line in enumerate(lines):
        newline = "" if position == last else "\n"
        match = _BORING_LINE_RE.fullmatch(line)
        if match is not None:
            indent, marker, rest = match.groups()
            if marker == "#":
                pieces.append(f"{indent}#{rest}{newline}")
                continue
            if marker in ("", " "):
                pieces.append(f"{_BORING_OPEN}{indent}{rest}{newline}{_BORING_CLOSE}")
                continue
        pieces.append(line + newline)
    return "".join(pieces)


def hide_lines_with_prefix(content: str, prefix: str) -> str:
    """Wrap lines whose first non-blank text is ``prefix`` in a boring span."""
    pieces: list[str] = []
    for line in _lines(content):
        if line.lstrip().startswith(prefix):
            pos = line.find(prefix)
            indent, rest = line[:pos], line[pos + len(prefix):]
            pieces.append(f"{_BORING_OPEN}{indent}{rest}\n{_BORING_CLOSE}")
        else:
            pieces.append(line + "\n")
    return "".join(pieces)


def _hidelines_prefix(classes: str, code: CodeConfig) -> Optional[str]:
    explicit = _HIDELINES_RE.search(classes)
    if explicit is not None:
        return explicit.group(1)
    language = _LANGUAGE_RE.search(classes)
    if language is not None:
        return code.hidelines.get(language.group(1))
    return None


def hide_lines(html: str, code: CodeConfig) -> str:
    """Convert hidden lines of every ``<code>`` block into boring spans."""

    def replace(match: re.Match[str]) -> str:
        text, classes, body = match.groups()
        if "language-rust" in classes:
            return f'<code class="{classes}">{hide_lines_rust(body)}</code>'
        prefix = _hidelines_prefix(classes, code)
        if prefix is None:
            return text
        return f'<code class="{classes}">{hide_lines_with_prefix(body, prefix)}</code>'

    return CODE_BLOCK_RE.sub(replace, html)


def post_process(
    rendered: str,
    playground: PlaygroundConfig,
    code: CodeConfig,
    edition: Optional[RustEdition],
) -> str:
    """Apply header links, code class fixes, playgrounds and line hiding."""
    rendered = build_header_links(rendered)
    rendered = fix_code_blocks(rendered)
    rendered = add_playground_pre(rendered, playground, edition)
    return hide_lines(rendered, code)