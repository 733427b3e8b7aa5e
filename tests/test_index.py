from pathlib import Path

import pytest

from mdbinder.index import index_path_for, is_readme_file


@pytest.mark.parametrize(
    "path",
    [
        "path/to/Readme.md",
        "path/to/README.md",
        "path/to/rEaDmE.md",
        "path/to/README.markdown",
        "path/to/README",
    ],
)
def test_file_stem_matches_readme(path):
    assert is_readme_file(path) is True


@pytest.mark.parametrize("path", ["path/to/README-README.md", "path/to/intro.md"])
def test_other_stems_do_not_match(path):
    assert is_readme_file(path) is False


def test_index_path_for_readme():
    assert index_path_for("guide/README.md") == Path("guide/index.md")


def test_index_path_for_other_file_unchanged():
    assert index_path_for("guide/intro.md") == Path("guide/intro.md")