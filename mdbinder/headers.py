"""Post-processing of rendered HTML: header anchors and playground code blocks."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import MutableMapping, Optional

_HEADER_RE = re.compile(
    r'<h(\d)(?: id="([^"]+)")?(?: class="([^"]+)")?>(.*?)</h\d>'
)
_IGNORE_CLASSES = frozenset({"menu-title", "mdbook-help-title"})

_FIX_CODE_BLOCKS_RE = re.compile(r'<code([^>]+)class="([^"]+)"([^>]*)>')

CODE_BLOCK_RE = re.compile(r'(<code[^>]?class="([^"]+)".*?>(.*?)</code>)', re.DOTALL)

_HTML_TAG_RE = re.compile(r"(<.*?>)")
_HTML_ENTITIES = ("&lt;", "&gt;", "&amp;", "&#39;", "&quot;")


class RustEdition(Enum):
    """Rust edition used to mark runnable code blocks."""

    E2015 = "2015"
    E2018 = "2018"
    E2021 = "2021"
    E2024 = "2024"

    @property
    def css_class(self) -> str:
        return f"edition{self.value}"


@dataclass(frozen=True)
class PlaygroundConfig:
    """Settings controlling how Rust code blocks become playgrounds."""

    editable: bool = False
    copyable: bool = True
    copy_js: bool = True
    line_numbers: bool = False
    runnable: bool = True


def _lines(s: str) -> list[str]:
    if not s:
        return []
    parts = s.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def _normalize_id(content: str) -> str:
    pieces = []
    for ch in content:
        if ch.isalnum() or ch in "_-":
            pieces.append(ch.lower())
        elif ch.isspace():
            pieces.append("-")
    return "".join(pieces)


def _unique_id_from_content(content: str, id_counter: MutableMapping[str, int]) -> str:
    text = _HTML_TAG_RE.sub("", content)
    for entity in _HTML_ENTITIES:
        text = text.replace(entity, "")
    base = _normalize_id(text)
    count = id_counter.get(base, 0)
    id_counter[base] = count + 1
    return base if count == 0 else f"{base}-{count}"


def insert_link_into_header(
    level: int,
    content: str,
    id: Optional[str],
    classes: Optional[str],
    id_counter: MutableMapping[str, int],
) -> str:
    """Wrap a header's content in a self-link, giving it a unique id if needed."""
    if id is None:
        id = _unique_id_from_content(content, id_counter)
    class_attr = f' class="{classes}"' if classes is not None else ""
    return (
        f'<h{level} id="{id}"{class_attr}>'
        f'<a class="header" href="#{id}">{content}</a></h{level}>'
    )


def build_header_links(html: str) -> str:
    """Give every header an id and an anchor pointing to itself."""
    id_counter: dict[str, int] = {}

    def replace(match: re.Match[str]) -> str:
        classes = match.group(3)
        if classes is not None and any(
            cls in _IGNORE_CLASSES for cls in classes.split(" ")
        ):
            return match.group(0)
        return insert_link_into_header(
            int(match.group(1)), match.group(4), match.group(2), classes, id_counter
        )

    return _HEADER_RE.sub(replace, html)


def fix_code_blocks(html: str) -> str:
    """Turn comma-separated code block classes into space-separated ones."""

    def replace(match: re.Match[str]) -> str:
        before, classes, after = match.groups()
        return f'<code{before}class="{classes.replace(",", " ")}"{after}>'

    return _FIX_CODE_BLOCKS_RE.sub(replace, html)


def partition_source(s: str) -> tuple[str, str]:
    """Split code into its leading crate attributes and the remaining body."""
    after_header = False
    before: list[str] = []
    after: list[str] = []
    for line in _lines(s):
        trimmed = line.strip()
        header = trimmed == "" or trimmed.startswith("#![")
        if not header or after_header:
            after_header = True
            after.append(line + "\n")
        else:
            before.append(line + "\n")
    return "".join(before), "".join(after)


def add_playground_pre(
    html: str,
    playground: PlaygroundConfig,
    edition: Optional[RustEdition],
) -> str:
    """Wrap runnable Rust code blocks in a playground ``<pre>``."""

    def replace(match: re.Match[str]) -> str:
        text, classes, code = match.groups()
        runnable = "language-rust" in classes and (
            (
                "ignore" not in classes
                and "noplayground" not in classes
                and "noplaypen" not in classes
                and playground.runnable
            )
            or "mdbook-runnable" in classes
        )
        if not runnable:
            return text

        if any(f"edition{year}" in classes for year in ("2015", "2018", "2021")):
            edition_class = ""
        elif edition is not None:
            edition_class = " " + edition.css_class
        else:
            edition_class = ""

        if (
            (playground.editable and "editable" in classes)
            or "fn main" in text
            or "quick_main!" in text
        ):
            content = code
        else:
            attrs, body = partition_source(code)
            content = f"# #![allow(unused)]\n{attrs}# fn main() {{\n{body}# }}"

        return (
            f'<pre class="playground"><code class="{classes}{edition_class}">'
            f"{content}</code></pre>"
        )

    return CODE_BLOCK_RE.sub(replace, html)