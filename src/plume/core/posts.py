from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from plume.core.document import Element, select_section
from plume.core.exceptions import LoaderError, MetaError, PlumeError
from plume.core.markup import Converter, parse_post
from plume.core.registry import Registry
from plume.core.taxonomy import Taxonomy

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Post:
    """A parsed post together with its stable identifier.

    ``discovery_index`` is the position at which the loader found the file;
    identifier assignment for new posts follows this order.
    """

    name: str
    title: str
    id: int
    content: Element
    tag_ids: tuple[int, ...]
    discovery_index: int

    @property
    def meta(self) -> Element | None:
        return select_section(self.content, "meta")

    @property
    def body(self) -> Element | None:
        return select_section(self.content, "body")


@dataclass(slots=True)
class Source:
    posts: list[Post] = field(default_factory=list)

    def __iter__(self) -> Iterator[Post]:
        return iter(self.posts)

    def __len__(self) -> int:
        return len(self.posts)

    def get(self, post_id: int) -> Post | None:
        return next((post for post in self.posts if post.id == post_id), None)


def process_post_meta(content: Element, post_id: int, taxonomy: Taxonomy) -> tuple[str, list[int]]:
    """Extract the title and register the tags of a parsed post.

    Raises:
        MetaError: If meta, title, the title value, or a tag label is missing.

    """
    meta = select_section(content, "meta")
    if meta is None:
        raise MetaError("no meta tag found")

    title = meta.find("title")
    if title is None:
        raise MetaError("no title tag found")

    title_value = title.get("value")
    if not title_value:
        raise MetaError("no value in title tag found")

    tag_ids: list[int] = []
    for tag in meta.find_all("tag"):
        label = tag.get("label")
        if not label:
            raise MetaError("no label found in a tag")
        tag_ids.append(taxonomy.assure_label_from_document(label, post_id))

    return title_value, tag_ids


def iter_post_files(posts_dir: Path, ignore_marker: str = "~") -> Iterator[Path]:
    """Yield post files below ``posts_dir`` in a stable, sorted walk order."""
    for dirpath, dirnames, filenames in os.walk(posts_dir):
        dirnames.sort()
        for filename in sorted(filenames):
            if ignore_marker and filename.startswith(ignore_marker):
                logger.debug("Skipping ignored post %s", filename)
                continue
            path = Path(dirpath) / filename
            if path.is_file():
                yield path


def load_post(
    path: Path,
    registry: Registry,
    taxonomy: Taxonomy,
    *,
    discovery_index: int,
    converter: Converter | None = None,
) -> Post:
    try:
        raw = path.read_bytes().decode("utf-8")
        content = parse_post(raw, converter)
        post_id = registry.assure("POST:" + path.name)
        title, tag_ids = process_post_meta(content, post_id, taxonomy)
    except (OSError, UnicodeDecodeError, PlumeError) as exc:
        raise LoaderError(path, str(exc)) from exc

    return Post(
        name=path.name,
        title=title,
        id=post_id,
        content=content,
        tag_ids=tuple(tag_ids),
        discovery_index=discovery_index,
    )


def load_source(
    posts_dir: Path,
    registry: Registry,
    taxonomy: Taxonomy,
    *,
    converter: Converter | None = None,
    ignore_marker: str = "~",
) -> Source:
    """Load every post under ``posts_dir``, assigning stable identifiers.

    The first failing file aborts the whole load.
    """
    posts_dir = Path(posts_dir)
    if not posts_dir.is_dir():
        raise LoaderError(posts_dir, "posts directory does not exist")

    source = Source()
    seen: dict[str, Path] = {}
    for index, path in enumerate(iter_post_files(posts_dir, ignore_marker)):
        if path.name in seen:
            raise LoaderError(path, f"duplicate post name, already loaded from {seen[path.name]}")
        seen[path.name] = path
        source.posts.append(
            load_post(path, registry, taxonomy, discovery_index=index, converter=converter)
        )

    logger.info("Loaded %d posts from %s", len(source), posts_dir)
    return source
