import io
import json
import shlex
import sys
from pathlib import Path

import pytest

from mdbinder.preprocessors import (
    MDBOOK_VERSION,
    CmdPreprocessor,
    PreprocessorContext,
)

BOOK = {
    "sections": [
        {
            "Chapter": {
                "name": "Intro",
                "content": "# Intro\n",
                "number": [1],
                "sub_items": [],
                "path": "intro.md",
                "source_path": "intro.md",
                "parent_names": [],
            }
        },
        "Separator",
    ],
    "__non_exhaustive": None,
}

CONFIG = {"book": {"title": "Guide", "src": "src"}, "output": {"html": {}}}

APPEND_SCRIPT = (
    "import json, sys\n"
    "ctx, book = json.load(sys.stdin)\n"
    "book['sections'].append({'PartTitle': ctx['renderer']})\n"
    "json.dump(book, sys.stdout)\n"
)

SUPPORTS_SCRIPT = (
    "import sys\n"
    "sys.exit(0 if sys.argv[1:] == ['supports', 'html'] else 1)\n"
)


def python_cmd(script):
    return shlex.join([sys.executable, "-c", script])


def make_ctx(root="/books/guide", renderer="some-renderer"):
    return PreprocessorContext(Path(root), CONFIG, renderer)


def test_round_trip_write_and_parse_input():
    cmd = CmdPreprocessor("test", "test")
    ctx = make_ctx()
    buffer = io.StringIO()
    cmd.write_input(buffer, BOOK, ctx)
    buffer.seek(0)
    got_ctx, got_book = CmdPreprocessor.parse_input(buffer)
    assert got_book == BOOK
    assert got_ctx == ctx


def test_context_carries_version():
    assert make_ctx().mdbook_version == MDBOOK_VERSION
    assert make_ctx().to_json()["mdbook_version"] == "0.4.51"


def test_chapter_titles_not_serialised():
    ctx = make_ctx()
    ctx.chapter_titles[Path("a.md")] = "Other"
    assert "chapter_titles" not in ctx.to_json()
    assert set(ctx.to_json()) == {"root", "config", "renderer", "mdbook_version"}


def test_parse_input_rejects_garbage():
    with pytest.raises(ValueError, match="Unable to parse the input"):
        CmdPreprocessor.parse_input(io.StringIO("not json"))


def test_parse_input_rejects_missing_fields():
    data = json.dumps([{"root": "/x"}, BOOK])
    with pytest.raises(ValueError, match="Unable to parse the input"):
        CmdPreprocessor.parse_input(io.StringIO(data))


def test_command_splits_words():
    cmd = CmdPreprocessor("x", "python3 'my script.py' --flag")
    assert cmd.command() == ["python3", "my script.py", "--flag"]


def test_command_empty_is_error():
    with pytest.raises(ValueError, match="Command string was empty"):
        CmdPreprocessor("x", "   ").command()


def test_run_returns_processed_book():
    cmd = CmdPreprocessor("append", python_cmd(APPEND_SCRIPT))
    result = cmd.run(make_ctx(renderer="html"), BOOK)
    assert result["sections"][:2] == BOOK["sections"]
    assert result["sections"][2] == {"PartTitle": "html"}


def test_run_nonzero_exit_is_error():
    cmd = CmdPreprocessor("broken", python_cmd("import sys; sys.stdin.read(); sys.exit(3)"))
    with pytest.raises(RuntimeError, match='"broken" preprocessor exited unsuccessfully'):
        cmd.run(make_ctx(), BOOK)


def test_run_bad_output_is_error():
    cmd = CmdPreprocessor("noisy", python_cmd("import sys; sys.stdin.read(); print('nope')"))
    with pytest.raises(ValueError, match="Unable to parse the preprocessed book"):
        cmd.run(make_ctx(), BOOK)


def test_run_missing_program_is_error():
    cmd = CmdPreprocessor("ghost", "mdbinder-no-such-preprocessor-xyz")
    with pytest.raises(RuntimeError, match="Is it installed"):
        cmd.run(make_ctx(), BOOK)


def test_supports_renderer_by_exit_code():
    cmd = CmdPreprocessor("picky", python_cmd(SUPPORTS_SCRIPT))
    assert cmd.supports_renderer("html") is True
    assert cmd.supports_renderer("epub") is False


def test_supports_renderer_missing_program():
    cmd = CmdPreprocessor("ghost", "mdbinder-no-such-preprocessor-xyz")
    assert cmd.supports_renderer("html") is False


def test_supports_renderer_empty_command():
    assert CmdPreprocessor("empty", "").supports_renderer("html") is False