"""Wrappers around the external programs used during a build."""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from collections.abc import Sequence
from pathlib import Path

from plume.core.exceptions import ToolExecutionError, ToolNotFoundError

logger = logging.getLogger(__name__)


class ExternalTool:
    """A program resolved from an ordered list of candidate binaries."""

    def __init__(self, candidates: Sequence[str]) -> None:
        self._candidates = list(candidates)

    @property
    def candidates(self) -> list[str]:
        return list(self._candidates)

    def locate(self) -> str | None:
        """Return the path of the first candidate found on ``PATH``."""
        for candidate in self._candidates:
            found = shutil.which(candidate)
            if found:
                return found
        return None

    def _resolve(self) -> str:
        found = self.locate()
        if not found:
            raise ToolNotFoundError(self._candidates)
        return found

    def _run(self, command: list[str]) -> subprocess.CompletedProcess[str]:
        logger.debug("Running %s", " ".join(command))
        result = subprocess.run(command, capture_output=True, text=True, encoding="utf-8", check=False)
        if result.returncode != 0:
            raise ToolExecutionError(Path(command[0]).name, result.returncode, result.stderr or result.stdout)
        return result


class MarkdownConverter(ExternalTool):
    """Convert markdown to HTML with pandoc."""

    def __init__(self, candidates: Sequence[str] = ("pandoc",)) -> None:
        super().__init__(candidates)

    def convert(self, markdown: str) -> str:
        binary = self._resolve()
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", prefix="pandoc-input-", suffix=".md", delete=False
        ) as handle:
            handle.write(markdown)
        try:
            result = self._run([binary, handle.name, "-f", "markdown", "-t", "html"])
        finally:
            Path(handle.name).unlink(missing_ok=True)
        return result.stdout


class XsltProcessor(ExternalTool):
    """Apply an XSL stylesheet to a file with xsltproc, or msxsl on Windows."""

    def __init__(self, candidates: Sequence[str] = ("xsltproc", "msxsl.exe")) -> None:
        super().__init__(candidates)

    def transform(self, source: Path, stylesheet: Path, destination: Path) -> None:
        binary = self._resolve()
        if Path(binary).stem.lower() == "msxsl":
            command = [binary, str(source), str(stylesheet), "-o", str(destination)]
        else:
            command = [binary, "-o", str(destination), str(stylesheet), str(source)]
        self._run(command)


__all__ = [
    "ExternalTool",
    "MarkdownConverter",
    "XsltProcessor",
]
