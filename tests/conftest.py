from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from textwrap import dedent

import pytest

from plume.core.config import PathsSettings, PlumeConfig
from plume.core.registry import Registry
from plume.core.taxonomy import Taxonomy


@dataclass(slots=True)
class SiteLayout:
    root: Path
    config: PlumeConfig

    @property
    def posts_dir(self) -> Path:
        return self.config.paths.abs_posts_dir

    @property
    def xml_dir(self) -> Path:
        return self.config.paths.abs_xml_dir

    def write_post(self, name: str, content: str) -> Path:
        path = self.posts_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(content).lstrip("\n"), encoding="utf-8")
        return path


@pytest.fixture
def site(tmp_path: Path) -> SiteLayout:
    """An empty site tree with default relative paths."""
    config = PlumeConfig(paths=PathsSettings(site_root=tmp_path))
    config.paths.abs_posts_dir.mkdir(parents=True)
    return SiteLayout(root=tmp_path, config=config)


@pytest.fixture
def registry(tmp_path: Path) -> Registry:
    return Registry(tmp_path / "lock.xml")


@pytest.fixture
def taxonomy(registry: Registry) -> Taxonomy:
    return Taxonomy(registry)


class FakeConverter:
    """Stands in for pandoc; wraps the markdown in a paragraph."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def convert(self, markdown: str) -> str:
        self.calls.append(markdown)
        return f"<p>{markdown}</p>\n"


class FakeXslt:
    """Records transforms and writes a marker file instead of running xsltproc."""

    def __init__(self) -> None:
        self.calls: list[tuple[Path, Path, Path]] = []

    def transform(self, source: Path, stylesheet: Path, destination: Path) -> None:
        self.calls.append((source, stylesheet, destination))
        destination.write_text(f"transformed {source.name}", encoding="utf-8")


@pytest.fixture
def fake_converter() -> FakeConverter:
    return FakeConverter()


@pytest.fixture
def fake_xslt() -> FakeXslt:
    return FakeXslt()
