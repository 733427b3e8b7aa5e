"""Render context and the external-command renderer."""

from __future__ import annotations

import json
import logging
import os
import re
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Union

from mdbinder.preprocessors import MDBOOK_VERSION

log = logging.getLogger(__name__)

PathLike = Union[str, Path]

_SEPARATORS = "/\\" if os.name == "nt" else "/"
_SPLIT_RE = re.compile(f"[{re.escape(_SEPARATORS)}]")


@dataclass
class RenderContext:
    """Everything a renderer is given to produce its output."""

    root: Path
    book: Any
    config: dict
    destination: Path
    version: str = MDBOOK_VERSION
    chapter_titles: dict = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        self.destination = Path(self.destination)

    def source_dir(self) -> Path:
        """The book's source directory."""
        book_config = self.config.get("book") or {}
        return self.root / book_config.get("src", "src")

    def to_json(self) -> dict[str, Any]:
        """The JSON-serialisable form; chapter titles are not included."""
        return {
            "version": self.version,
            "root": str(self.root),
            "book": self.book,
            "config": self.config,
            "destination": str(self.destination),
        }

    @staticmethod
    def from_json(reader: IO[str]) -> "RenderContext":
        """Load a render context from its JSON representation."""
        try:
            data = json.load(reader)
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            return RenderContext(
                root=Path(data["root"]),
                book=data["book"],
                config=data["config"],
                destination=Path(data["destination"]),
                version=data["version"],
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise ValueError("Unable to deserialize the `RenderContext`") from exc


def _component_count(exe: str) -> int:
    count = 1 if exe[:1] and exe[0] in _SEPARATORS else 0
    for position, piece in enumerate(_SPLIT_RE.split(exe)):
        if not piece or (piece == "." and position != 0):
            continue
        count += 1
    return count


def _config_lookup(config: dict, dotted: str) -> Any:
    value: Any = config
    for key in dotted.split("."):
        if not isinstance(value, dict) or key not in value:
            return None
        value = value[key]
    return value


@dataclass(frozen=True)
class CmdRenderer:
    """A renderer that delegates to an external program.

    The program runs inside the destination directory and receives the
    render context as JSON on stdin; a non-zero exit code means failure.
    """

    name: str
    cmd: str

    def compose_command(self, root: PathLike, destination: PathLike) -> list[str]:
        """The argument vector to run, with a relative executable resolved."""
        words = shlex.split(self.cmd)
        if not words:
            raise ValueError("Command string was empty")
        exe, args = words[0], words[1:]

        if _component_count(exe) != 1:
            root, destination = Path(root), Path(destination)
            abs_exe = root / exe
            if abs_exe.exists():
                exe = str(abs_exe)
            else:
                legacy_path = destination / exe
                if legacy_path.exists():
                    log.warning(
                        "Renderer command `%s` uses a path relative to the renderer "
                        "output directory `%s`. This was previously accepted, but has "
                        "been deprecated. Relative executable paths should be relative "
                        "to the book root.",
                        exe,
                        destination,
                    )
                    exe = str(legacy_path)
                else:
                    exe = str(abs_exe)
        return [exe, *args]

    def _handle_start_error(self, ctx: RenderContext, error: OSError) -> None:
        if isinstance(error, FileNotFoundError):
            optional = _config_lookup(ctx.config, f"output.{self.name}.optional")
            if optional is True:
                log.warning(
                    "The command `%s` for backend `%s` was not found, "
                    "but was marked as optional.",
                    self.cmd,
                    self.name,
                )
                return
            log.error(
                'The command `%s` wasn\'t found, is the "%s" backend installed? '
                'If you want to ignore this error when the "%s" backend is not '
                "installed, set `optional = true` in the `[output.%s]` section of "
                "the book.toml configuration file.",
                self.cmd,
                self.name,
                self.name,
                self.name,
            )
        raise RuntimeError("Unable to start the backend") from error

    def render(self, ctx: RenderContext) -> None:
        """Run the external program, feeding it the render context."""
        log.info('Invoking the "%s" renderer', self.name)

        try:
            ctx.destination.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass

        argv = self.compose_command(ctx.root, ctx.destination)
        try:
            proc = subprocess.Popen(
                argv, stdin=subprocess.PIPE, cwd=ctx.destination
            )
        except OSError as exc:
            self._handle_start_error(ctx, exc)
            return

        try:
            proc.stdin.write(json.dumps(ctx.to_json()).encode("utf-8"))
        except OSError as exc:
            log.warning("Error writing the RenderContext to the backend, %s", exc)
        finally:
            try:
                proc.stdin.close()
            except OSError:
                pass

        try:
            returncode = proc.wait()
        except OSError as exc:
            raise RuntimeError("Error waiting for the backend to complete") from exc

        log.debug("%s exited with status %s", self.cmd, returncode)
        if returncode != 0:
            log.error("Renderer exited with non-zero return code.")
            raise RuntimeError(f'The "{self.name}" renderer failed')