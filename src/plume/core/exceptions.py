"""Core exceptions for the Plume application."""

from __future__ import annotations

from pathlib import Path


class PlumeError(Exception):
    """Base exception for all Plume errors."""


class RegistryError(PlumeError):
    """Raised when the identifier registry store cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid registry file {path}: {reason}")


class AddressOverflowError(PlumeError):
    """Raised when an identifier does not fit the four hex digit address space."""

    def __init__(self, identifier: int) -> None:
        self.identifier = identifier
        super().__init__(f"Identifier {identifier} exceeds the address space (max 0xffff)")


class MarkupError(PlumeError):
    """Raised when a post written in the custom markup cannot be parsed."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        super().__init__(message)


class MetaError(PlumeError):
    """Raised when a parsed post lacks required metadata."""


class LoaderError(PlumeError):
    """Raised when a post file cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed reading post document {path}: {reason}")


class BuildError(PlumeError):
    """Raised when a build stage fails to write its output."""

    def __init__(self, stage: str, path: Path, reason: str) -> None:
        self.stage = stage
        self.path = path
        self.reason = reason
        super().__init__(f"Build stage '{stage}' failed at {path}: {reason}")


class ToolError(PlumeError):
    """Base exception for external tool invocations."""


class ToolNotFoundError(ToolError):
    """Raised when none of the candidate binaries is available."""

    def __init__(self, candidates: list[str]) -> None:
        self.candidates = candidates
        super().__init__(f"None of the external tools is installed: {', '.join(candidates)}")


class ToolExecutionError(ToolError):
    """Raised when an external tool exits with a failure status."""

    def __init__(self, tool: str, returncode: int, output: str) -> None:
        self.tool = tool
        self.returncode = returncode
        self.output = output
        super().__init__(f"{tool} failed with exit code {returncode}: {output.strip()}")
