"""Build pipeline writing the canonical XML tree and its transformed mirrors."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from pathlib import Path

from plume.core.document import Element, to_xml
from plume.core.exceptions import BuildError
from plume.core.posts import Source
from plume.core.registry import format_address
from plume.core.taxonomy import Taxonomy
from plume.engine.pages import render_home, render_post, render_tag
from plume.infra.tools import XsltProcessor

logger = logging.getLogger(__name__)

CANONICAL_SUFFIX = ".xml"
STYLESHEET_SUFFIX = ".xsl"


@contextmanager
def build_stage(name: str, fallback_path: Path) -> Generator[None, None, None]:
    """Turn filesystem errors raised inside a stage into :class:`BuildError`."""
    try:
        yield
    except OSError as exc:
        path = Path(exc.filename) if exc.filename else fallback_path
        raise BuildError(name, path, exc.strerror or str(exc)) from exc


class BuildPipeline:
    """Render a loaded source into ``<output>/<xml>`` and apply stylesheets.

    Stages run strictly in order; the first failure propagates and whatever
    was already written stays on disk.
    """

    def __init__(
        self,
        xml_dir: Path,
        *,
        statics_dir: Path | None = None,
        styles_dir: Path | None = None,
        site_title: str = "փետուր",
        page_name: str = "index.xml",
        xslt: XsltProcessor | None = None,
    ) -> None:
        self.xml_dir = Path(xml_dir)
        self.output_root = self.xml_dir.parent
        self.statics_dir = statics_dir
        self.styles_dir = styles_dir
        self.site_title = site_title
        self.page_name = page_name
        self.xslt = xslt or XsltProcessor()

    def run(self, source: Source, taxonomy: Taxonomy) -> None:
        with build_stage("clear", self.output_root):
            self.clear()

        with build_stage("posts", self.xml_dir):
            for post in source:
                self.write_page(post.id, render_post(post, taxonomy))

        with build_stage("tags", self.xml_dir):
            for tag in taxonomy.tags:
                self.write_page(tag.id, render_tag(tag, source))

        with build_stage("home", self.xml_dir):
            self._write(self.xml_dir / self.page_name, render_home(source, taxonomy, self.site_title))

        with build_stage("statics", self.xml_dir):
            self.copy_statics()

        with build_stage("transforms", self.output_root):
            self.apply_stylesheets()

        logger.info("Built %d posts and %d tags into %s", len(source), len(taxonomy.tags), self.xml_dir)

    def clear(self) -> None:
        """Remove every top-level directory of the output root, then recreate the XML dir."""
        if self.output_root.is_dir():
            for entry in self.output_root.iterdir():
                if entry.is_dir():
                    logger.debug("Removing %s", entry)
                    shutil.rmtree(entry)
        self.xml_dir.mkdir(parents=True, exist_ok=True)

    def write_page(self, identifier: int, page: Element) -> Path:
        page_dir = self.xml_dir / format_address(identifier)
        page_dir.mkdir(parents=True, exist_ok=True)
        return self._write(page_dir / self.page_name, page)

    def _write(self, path: Path, page: Element) -> Path:
        path.write_bytes(to_xml(page))
        return path

    def copy_statics(self) -> None:
        if self.statics_dir is None or not self.statics_dir.is_dir():
            logger.debug("No statics directory, skipping")
            return
        for path, relative in _walk_files(self.statics_dir):
            destination = self.xml_dir / relative
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(path, destination)

    def stylesheets(self) -> list[Path]:
        if self.styles_dir is None or not self.styles_dir.is_dir():
            return []
        return [path for path, _ in _walk_files(self.styles_dir) if path.suffix.lower() == STYLESHEET_SUFFIX]

    def apply_stylesheets(self) -> None:
        for stylesheet in self.stylesheets():
            style_name = stylesheet.stem
            logger.info("Applying stylesheet %s", stylesheet.name)
            self.transform_tree(stylesheet, self.output_root / style_name, style_name)

    def transform_tree(self, stylesheet: Path, destination_root: Path, style_name: str) -> None:
        """Mirror the XML tree, transforming canonical pages and copying the rest."""
        destination_root.mkdir(parents=True, exist_ok=True)
        for path, relative in _walk_files(self.xml_dir):
            destination = destination_root / relative
            destination.parent.mkdir(parents=True, exist_ok=True)
            if path.suffix.lower() != CANONICAL_SUFFIX:
                shutil.copyfile(path, destination)
                continue
            self.xslt.transform(path, stylesheet, destination.with_name(f"{destination.stem}.{style_name}"))


def _walk_files(root: Path) -> Iterator[tuple[Path, Path]]:
    for path in sorted(root.rglob("*")):
        if path.is_file():
            yield path, path.relative_to(root)
