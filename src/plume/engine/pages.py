"""Generated page trees for posts, tags and the home index."""

from __future__ import annotations

from collections.abc import Callable

from plume.core.document import BodyTag, Element, Node, Text
from plume.core.posts import Post, Source
from plume.core.registry import format_address
from plume.core.taxonomy import Tag, Taxonomy


def _copy_element(element: Element) -> Element:
    return element.copy()


def _copy_text(text: Text) -> Text | None:
    if not text.value.strip():
        return None
    return Text(text.value)


# Body children are copied by tag; anything missing from the table is dropped.
BODY_COPIERS: dict[str, Callable[[Element], Element]] = {tag.value: _copy_element for tag in BodyTag}


def copy_body(source: Element, destination: Element) -> None:
    """Append the whitelisted children of ``source`` to ``destination``."""
    for child in source.children:
        copied: Node | None
        if isinstance(child, Text):
            copied = _copy_text(child)
        else:
            copier = BODY_COPIERS.get(child.tag)
            copied = copier(child) if copier else None
        if copied is not None:
            destination.append(copied)


def address_link(parent: Element, identifier: int, label: str) -> Element:
    address = format_address(identifier)
    return parent.sub(BodyTag.LINK.value, f"{address} - {label}", href=f"/{address}/")


def _page(title: str) -> tuple[Element, Element, Element]:
    document = Element("document")
    meta = document.sub("meta")
    meta.sub("title", value=title)
    body = document.sub("body")
    return document, meta, body


def render_post(post: Post, taxonomy: Taxonomy) -> Element:
    document, meta, body = _page(post.title)

    tags = [tag for tag in (taxonomy.get(tag_id) for tag_id in post.tag_ids) if tag is not None]
    for tag in tags:
        meta.sub("tag", label=tag.label, id=format_address(tag.id))

    body.sub(BodyTag.BOLD.value, post.title)
    for tag in tags:
        address_link(body, tag.id, tag.label)

    post_body = post.body if post.body is not None else loose_body(post.content)
    if post_body is not None:
        copy_body(post_body, body)
    return document


def loose_body(content: Element) -> Element | None:
    """Collect what follows ``meta`` in a document that has no ``body`` element.

    Nested ``document`` wrappers are unwrapped; the whitelist is applied later
    by :func:`copy_body`.
    """
    if content.tag != "document":
        return None
    meta = content.find("meta")
    if meta is None:
        return None

    loose = Element("body")
    following = content.children[content.children.index(meta) + 1 :]
    for child in following:
        if isinstance(child, Element) and child.tag == "document":
            loose.children.extend(child.children)
        else:
            loose.append(child)
    return loose


def render_tag(tag: Tag, source: Source) -> Element:
    document, _, body = _page(tag.label)
    body.sub(BodyTag.BOLD.value, tag.label)
    for post_id in tag.mentions:
        post = source.get(post_id)
        if post is None:
            continue
        address_link(body, post.id, post.title)
    return document


def render_home(source: Source, taxonomy: Taxonomy, site_title: str) -> Element:
    document, _, body = _page(site_title)
    for post in sorted(source, key=lambda p: p.id, reverse=True):
        address_link(body, post.id, post.title)

    body.sub(BodyTag.TEXT.value)

    for tag in sorted(taxonomy.tags, key=lambda t: t.id, reverse=True):
        address_link(body, tag.id, tag.label)
    return document
