"""Template helpers: relative roots, theme options and hashed resources."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Union


def path_to_root(path: Union[str, Path]) -> str:
    """Relative prefix (``../`` per directory) leading from ``path`` to the root."""
    parent = Path(path).parent
    return "".join(
        "../" for part in parent.parts if part not in ("..", parent.anchor)
    )


def theme_option(param: str, default_theme: str) -> str:
    """Theme name, marked ``(default)`` when it is the default theme."""
    if not isinstance(param, str):
        raise TypeError("theme_option: parameter 0 must be a string")
    if not isinstance(default_theme, str):
        raise TypeError("theme_option: default_theme must be a string")
    if param.lower() == default_theme.lower():
        return f"{param} (default)"
    return param


def resource_path(
    param: str, base_path: str, hash_map: Mapping[str, str]
) -> str:
    """Path of a possibly hashed resource, relative to the page at ``base_path``."""
    if not isinstance(param, str):
        raise TypeError("Param 0 with String type is required for resource helper.")
    if not isinstance(base_path, str):
        raise TypeError("Type error for `path`, string expected")
    prefix = path_to_root(base_path.replace('"', ""))
    return prefix + hash_map.get(param, param)