from __future__ import annotations

import logging
from dataclasses import dataclass, field

from plume.core.registry import Registry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Tag:
    label: str
    id: int
    mentions: list[int] = field(default_factory=list)


class Taxonomy:
    """Tags discovered during one build, with the posts mentioning them."""

    def __init__(self, registry: Registry) -> None:
        self.registry = registry
        self.tags: list[Tag] = []

    def find(self, label: str) -> Tag | None:
        """Exact, case-sensitive label lookup."""
        return next((tag for tag in self.tags if tag.label == label), None)

    def get(self, tag_id: int) -> Tag | None:
        return next((tag for tag in self.tags if tag.id == tag_id), None)

    def assure_label_from_document(self, label: str, post_id: int) -> int:
        """Record that ``post_id`` mentions ``label`` and return the tag id."""
        tag = self.find(label)
        if tag is not None:
            if post_id not in tag.mentions:
                tag.mentions.append(post_id)
            return tag.id

        tag_id = self.registry.assure("TAG:" + label)
        self.tags.append(Tag(label=label, id=tag_id, mentions=[post_id]))
        logger.debug("New tag %r -> %s", label, tag_id)
        return tag_id
