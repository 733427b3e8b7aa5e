"""Rendering of the table of contents sidebar."""

from __future__ import annotations

from typing import Iterable, Mapping

_ESCAPES = str.maketrans(
    {
        "<": "&lt;",
        ">": "&gt;",
        "'": "&#39;",
        "\\": "&#92;",
        "&": "&amp;",
        '"': "&quot;",
    }
)


def _escape(text: str) -> str:
    return text.translate(_ESCAPES)


def _with_html_extension(path: str) -> str:
    prefix, sep, name = path.rpartition("/")
    if name in ("", ".", ".."):
        return path
    dot = name.rfind(".")
    if dot > 0:
        name = name[:dot]
    return f"{prefix}{sep}{name}.html"


def _li_open(is_expanded: bool, is_affix: bool) -> str:
    classes = "chapter-item "
    if is_expanded:
        classes += "expanded "
    if is_affix:
        classes += "affix "
    return f'<li class="{classes}">'


def _decode(chapters: Iterable[Mapping[str, str]]) -> list[Mapping[str, str]]:
    items = list(chapters)
    for item in items:
        if not isinstance(item, Mapping) or not all(
            isinstance(key, str) and isinstance(value, str)
            for key, value in item.items()
        ):
            raise TypeError("Could not decode the JSON data")
    return items


def render_toc(
    chapters: Iterable[Mapping[str, str]],
    fold_enable: bool,
    fold_level: int,
    is_toc_html: bool = False,
    no_section_label: bool = False,
) -> str:
    """Render the chapter list as nested ordered lists of links.

    ``chapters`` holds one string mapping per book item, with the keys
    ``name``, ``path``, ``section``, ``has_sub_items``, ``part`` or ``spacer``.
    """
    items = _decode(chapters)
    if not isinstance(fold_enable, bool):
        raise TypeError("Type error for `fold_enable`, bool expected")
    if isinstance(fold_level, bool) or not isinstance(fold_level, int) or fold_level < 0:
        raise TypeError("Type error for `fold_level`, u64 expected")

    out = ['<ol class="chapter">']
    current_level = 1

    for item in items:
        section = item.get("section")
        level = section.count(".") if section is not None else 1
        is_expanded = not fold_enable or level - 1 < fold_level

        if level > current_level:
            while level > current_level:
                out.append('<li><ol class="section">')
                current_level += 1
            out.append(_li_open(is_expanded, False))
        elif level < current_level:
            while level < current_level:
                out.append("</ol></li>")
                current_level -= 1
            out.append(_li_open(is_expanded, False))
        else:
            out.append(_li_open(is_expanded, section is None))

        if "spacer" in item:
            out.append('<li class="spacer"></li>')
            continue

        part = item.get("part")
        if part is not None:
            out.append(f'<li class="part-title">{_escape(part)}</li>')
            continue

        path = item.get("path")
        path_exists = bool(path)
        if path_exists:
            link = _with_html_extension(path).replace("\\", "/")
            closing = '" target="_parent">' if is_toc_html else '">'
            out.append(f'<a href="{link}{closing}')
        else:
            out.append("<div>")

        if not no_section_label and section is not None:
            out.append(f'<strong aria-hidden="true">{section}</strong> ')

        name = item.get("name")
        if name is not None:
            out.append(_escape(name))

        out.append("</a>" if path_exists else "</div>")

        if item.get("has_sub_items") == "true" and fold_enable:
            out.append('<a class="toggle"><div>❱</div></a>')
        out.append("</li>")

    while current_level > 1:
        out.append("</ol></li>")
        current_level -= 1

    out.append("</ol>")
    return "".join(out)