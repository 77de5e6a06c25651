"""Run a complete build: registry, taxonomy, posts, pages, registry save."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from plume.core.config import PlumeConfig
from plume.core.posts import Source, load_source
from plume.core.registry import Registry
from plume.core.taxonomy import Taxonomy
from plume.engine.build import BuildPipeline
from plume.infra.tools import MarkdownConverter, XsltProcessor

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BuildResult:
    registry: Registry
    taxonomy: Taxonomy
    source: Source


def run_build(
    config: PlumeConfig,
    *,
    converter: MarkdownConverter | None = None,
    xslt: XsltProcessor | None = None,
) -> BuildResult:
    """Load, render and persist.

    The registry is only saved once every stage has succeeded, so a failed
    run never records identifiers for posts that produced no output.
    """
    paths = config.paths
    converter = converter or MarkdownConverter(config.tools.markdown)
    xslt = xslt or XsltProcessor(config.tools.xslt)

    registry = Registry.load(paths.abs_lock_file)
    taxonomy = Taxonomy(registry)
    source = load_source(
        paths.abs_posts_dir,
        registry,
        taxonomy,
        converter=converter.convert,
        ignore_marker=config.build.ignore_marker,
    )

    pipeline = BuildPipeline(
        paths.abs_xml_dir,
        statics_dir=paths.abs_statics_dir,
        styles_dir=paths.abs_styles_dir,
        site_title=config.build.site_title,
        page_name=config.build.page_name,
        xslt=xslt,
    )
    pipeline.run(source, taxonomy)

    registry.save()
    logger.info("Registry holds %d identifiers", len(registry))
    return BuildResult(registry=registry, taxonomy=taxonomy, source=source)
