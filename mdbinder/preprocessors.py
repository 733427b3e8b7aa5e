"""Preprocessor context and the external-command preprocessor."""

from __future__ import annotations

import io
import json
import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Union

log = logging.getLogger(__name__)

MDBOOK_VERSION = "0.4.51"


@dataclass
class PreprocessorContext:
    """Extra information handed to a preprocessor alongside the book."""

    root: Path
    config: dict
    renderer: str
    mdbook_version: str = MDBOOK_VERSION
    chapter_titles: dict = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        self.root = Path(self.root)

    def to_json(self) -> dict[str, Any]:
        """The JSON-serialisable form; chapter titles are not included."""
        return {
            "root": str(self.root),
            "config": self.config,
            "renderer": self.renderer,
            "mdbook_version": self.mdbook_version,
        }


def _context_from_json(data: Any) -> PreprocessorContext:
    if not isinstance(data, dict):
        raise ValueError("preprocessor context must be a JSON object")
    try:
        return PreprocessorContext(
            root=Path(data["root"]),
            config=data["config"],
            renderer=data["renderer"],
            mdbook_version=data["mdbook_version"],
        )
    except (KeyError, TypeError) as exc:
        raise ValueError(f"missing or invalid field in context: {exc}") from exc


def _describe_status(returncode: int) -> str:
    if returncode < 0:
        return f"signal: {-returncode}"
    return f"exit status: {returncode}"


@dataclass(frozen=True)
class CmdPreprocessor:
    """A preprocessor that delegates to an external program.

    ``run`` sends ``[context, book]`` as JSON on the program's stdin and reads
    the processed book back as JSON from its stdout. ``supports_renderer``
    runs ``<cmd> supports <renderer>`` and checks for a zero exit code.
    """

    name: str
    cmd: str

    @staticmethod
    def parse_input(reader: IO[str]) -> tuple[PreprocessorContext, Any]:
        """Parse the ``[context, book]`` pair written to a preprocessor's stdin."""
        try:
            data = json.load(reader)
            if not isinstance(data, list) or len(data) != 2:
                raise ValueError("expected a [context, book] pair")
            ctx_data, book = data
            return _context_from_json(ctx_data), book
        except ValueError as exc:
            raise ValueError("Unable to parse the input") from exc

    def write_input(self, writer: IO[str], book: Any, ctx: PreprocessorContext) -> None:
        """Write the ``[context, book]`` pair as JSON to a text stream."""
        json.dump([ctx.to_json(), book], writer)

    def command(self) -> list[str]:
        """The argument vector this preprocessor invokes."""
        words = shlex.split(self.cmd)
        if not words:
            raise ValueError("Command string was empty")
        return words

    def run(self, ctx: PreprocessorContext, book: Any) -> Any:
        """Run the external program on ``book`` and return the processed book."""
        argv = self.command()
        buffer = io.StringIO()
        self.write_input(buffer, book, ctx)

        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
            )
        except OSError as exc:
            raise RuntimeError(
                f'Unable to start the "{self.name}" preprocessor. Is it installed?'
            ) from exc

        try:
            stdout, _ = proc.communicate(buffer.getvalue())
        except OSError as exc:
            raise RuntimeError(
                f'Error waiting for the "{self.name}" preprocessor to complete'
            ) from exc

        log.debug("%s exited with status %s", self.cmd, proc.returncode)
        if proc.returncode != 0:
            raise RuntimeError(
                f'The "{self.name}" preprocessor exited unsuccessfully with '
                f"{_describe_status(proc.returncode)} status"
            )

        try:
            return json.loads(stdout)
        except ValueError as exc:
            raise ValueError(
                f'Unable to parse the preprocessed book from "{self.name}" processor'
            ) from exc

    def supports_renderer(self, renderer: str) -> bool:
        """Ask the external program whether it supports ``renderer``."""
        log.debug(
            'Checking if the "%s" preprocessor supports "%s"', self.name, renderer
        )
        try:
            argv = self.command()
        except ValueError as exc:
            log.warning(
                'Unable to create the command for the "%s" preprocessor, %s',
                self.name,
                exc,
            )
            return False

        try:
            completed = subprocess.run(
                [*argv, "supports", renderer], stdin=subprocess.DEVNULL
            )
        except FileNotFoundError:
            log.warning(
                'The command wasn\'t found, is the "%s" preprocessor installed?',
                self.name,
            )
            log.warning("\tCommand: %s", self.cmd)
            return False
        except OSError:
            return False
        return completed.returncode == 0


PathLike = Union[str, Path]