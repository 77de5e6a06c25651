"""Canonical document tree shared by parsed posts and generated pages.

A document is a tree of :class:`Element` nodes whose children are either
further elements or :class:`Text` leaves, in significant order. The same model
is used for parsed post content (root ``document`` holding ``meta`` and
``body``) and for every page the build writes.

Serialization goes through lxml so that escaping and indentation follow the
XML rules exactly.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from lxml import etree

__all__ = [
    "BodyTag",
    "Element",
    "Node",
    "Text",
    "from_xml",
    "select_section",
    "to_xml",
]


class BodyTag(str, Enum):
    """Element tags allowed in a page body."""

    BOLD = "bold"
    TEXT = "text"
    CODE = "code"
    ITEM = "item"
    LINK = "link"

    @classmethod
    def allows(cls, tag: str) -> bool:
        return tag in cls._value2member_map_


@dataclass(slots=True)
class Text:
    value: str


@dataclass(slots=True)
class Element:
    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)

    def append(self, node: Node) -> Node:
        self.children.append(node)
        return node

    def sub(self, tag: str, text: str | None = None, **attrs: str) -> Element:
        """Create a child element, optionally holding a single text leaf."""
        child = Element(tag, dict(attrs))
        if text is not None:
            child.children.append(Text(text))
        self.children.append(child)
        return child

    def add_text(self, value: str) -> Text:
        text = Text(value)
        self.children.append(text)
        return text

    def elements(self) -> Iterator[Element]:
        return (child for child in self.children if isinstance(child, Element))

    def find(self, tag: str) -> Element | None:
        """Return the first child element with ``tag``."""
        return next((child for child in self.elements() if child.tag == tag), None)

    def find_all(self, tag: str) -> list[Element]:
        return [child for child in self.elements() if child.tag == tag]

    def get(self, name: str, default: str = "") -> str:
        return self.attrs.get(name, default)

    def text_content(self) -> str:
        """Concatenate every text leaf below this element."""
        parts: list[str] = []
        for child in self.children:
            if isinstance(child, Text):
                parts.append(child.value)
            else:
                parts.append(child.text_content())
        return "".join(parts)

    def copy(self) -> Element:
        return Element(
            self.tag,
            dict(self.attrs),
            [child.copy() if isinstance(child, Element) else Text(child.value) for child in self.children],
        )


Node = Union[Element, Text]


def select_section(root: Element, name: str) -> Element | None:
    """Find ``name`` either as the root itself or directly under a ``document`` root."""
    if root.tag == name:
        return root
    if root.tag == "document":
        return root.find(name)
    return None


def _to_lxml(element: Element) -> etree._Element:
    node = etree.Element(element.tag, element.attrs)
    last: etree._Element | None = None
    for child in element.children:
        if isinstance(child, Text):
            if last is None:
                node.text = (node.text or "") + child.value
            else:
                last.tail = (last.tail or "") + child.value
        else:
            last = _to_lxml(child)
            node.append(last)
    return node


def _from_lxml(node: etree._Element) -> Element:
    element = Element(etree.QName(node).localname, {str(k): str(v) for k, v in node.attrib.items()})
    if node.text:
        element.children.append(Text(node.text))
    for child in node:
        # comments and processing instructions carry no content but may have a tail
        if isinstance(child.tag, str):
            element.children.append(_from_lxml(child))
        if child.tail:
            element.children.append(Text(child.tail))
    return element


def to_xml(root: Element, *, indent: str = "    ") -> bytes:
    """Serialize ``root`` to an indented UTF-8 XML document."""
    tree = _to_lxml(root)
    etree.indent(tree, space=indent)
    return etree.tostring(tree, xml_declaration=True, encoding="UTF-8") + b"\n"


def from_xml(source: str | bytes) -> Element:
    """Parse XML text into a canonical tree, keeping whitespace-only text.

    Raises:
        etree.XMLSyntaxError: If ``source`` is not well-formed.

    """
    if isinstance(source, str):
        source = source.encode("utf-8")
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    return _from_lxml(etree.fromstring(source, parser=parser))
