"""Mapping of README chapters onto ``index.md``."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Union

_README_RE = re.compile(r"readme", re.IGNORECASE)


def is_readme_file(path: Union[str, Path]) -> bool:
    """True if the file stem is exactly ``readme``, ignoring case."""
    return _README_RE.fullmatch(Path(path).stem) is not None


def index_path_for(path: Union[str, Path]) -> Path:
    """The path a chapter is served from: README files become ``index.md``."""
    path = Path(path)
    if is_readme_file(path):
        return path.with_name("index.md")
    return path