"""Parser for the line-oriented post markup.

A post starts with two metadata lines::

    title: 'A title'
    tags: ['one', 'two']

followed by body lines dispatched on their prefix:

- ```` ``` ```` opens and closes a fenced block, rendered through the
  markdown converter into a ``code`` element,
- ``# `` a ``bold`` line,
- ``- `` an ``item``,
- ``> href text...`` a ``link``,
- anything else starts a ``text`` paragraph that runs until a blank line or a
  prefixed line.

Posts that do not start with ``title:`` are XML, optionally in the legacy form
where loose body content follows a ``<meta>`` block.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from lxml import etree

from plume.core.document import BodyTag, Element, from_xml
from plume.core.exceptions import MarkupError, PlumeError

logger = logging.getLogger(__name__)

Converter = Callable[[str], str]

TITLE_RE = re.compile(r"""title:\s*['"]([^'"]+)['"]""")
TAGS_RE = re.compile(r"tags:\s*\[(.*?)\]")
TAG_ITEM_RE = re.compile(r"""['"]([^'"]+)['"]""")

FENCE = "```"
BOLD_PREFIX = "# "
ITEM_PREFIX = "- "
LINK_PREFIX = "> "
_BLOCK_PREFIXES = (FENCE, BOLD_PREFIX, ITEM_PREFIX, LINK_PREFIX)

META_CLOSE = "</meta>"
_METADATA_LINES = 2


def is_custom_syntax(content: str) -> bool:
    """Whether ``content`` is written in the custom markup rather than XML."""
    first_line = content.split("\n", 1)[0].strip()
    return first_line.startswith("title:")


def parse_metadata(title_line: str, tags_line: str) -> tuple[str, list[str]]:
    title_match = TITLE_RE.search(title_line)
    if not title_match:
        raise MarkupError("invalid title format, expected: title: 'title'", line=1)

    tags_match = TAGS_RE.search(tags_line)
    if not tags_match:
        raise MarkupError("invalid tags format, expected: tags: ['tag1', 'tag2']", line=2)

    return title_match.group(1), TAG_ITEM_RE.findall(tags_match.group(1))


def parse_custom_syntax(content: str, converter: Converter | None = None) -> Element:
    """Parse a custom-markup post into a ``document`` tree."""
    lines = content.split("\n")
    if len(lines) < _METADATA_LINES:
        raise MarkupError("file must have at least 2 lines for metadata")

    title, tags = parse_metadata(lines[0], lines[1])

    document = Element("document")
    meta = document.sub("meta")
    meta.sub("title", value=title)
    for label in tags:
        meta.sub("tag", label=label)

    body = document.sub("body")
    _BodyParser(lines, _METADATA_LINES, converter).parse_into(body)
    return document


class _BodyParser:
    def __init__(self, lines: list[str], start: int, converter: Converter | None) -> None:
        self.lines = lines
        self.index = start
        self.converter = converter

    def parse_into(self, body: Element) -> None:
        while self.index < len(self.lines):
            line = self.lines[self.index].strip()

            if line.startswith(FENCE):
                body.append(self._code_block())
            elif line.startswith(BOLD_PREFIX):
                body.sub(BodyTag.BOLD.value, line[len(BOLD_PREFIX) :])
                self.index += 1
            elif line.startswith(ITEM_PREFIX):
                body.sub(BodyTag.ITEM.value, line[len(ITEM_PREFIX) :])
                self.index += 1
            elif line.startswith(LINK_PREFIX):
                parts = line[len(LINK_PREFIX) :].split()
                if parts:
                    body.sub(BodyTag.LINK.value, " ".join(parts[1:]) or parts[0], href=parts[0])
                self.index += 1
            elif line:
                body.sub(BodyTag.TEXT.value, "\n".join(self._paragraph()))
            else:
                self.index += 1

    def _paragraph(self) -> list[str]:
        collected = [self.lines[self.index].strip()]
        self.index += 1
        while self.index < len(self.lines):
            line = self.lines[self.index].strip()
            if not line or line.startswith(_BLOCK_PREFIXES):
                break
            collected.append(line)
            self.index += 1
        return collected

    def _code_block(self) -> Element:
        start = self.index
        end = start + 1
        while end < len(self.lines) and not self.lines[end].strip().startswith(FENCE):
            end += 1
        if end >= len(self.lines):
            raise MarkupError(f"unclosed code block starting at line {start + 1}", line=start + 1)

        self.index = end + 1
        source = "\n".join(self.lines[start + 1 : end])
        return render_code(source, self.converter)


def render_code(source: str, converter: Converter | None) -> Element:
    """Build a ``code`` element from markdown, keeping the raw source if conversion fails."""
    code = Element(BodyTag.CODE.value)
    if converter is None:
        code.add_text(source)
        return code

    try:
        html = converter(source)
        fragment = from_xml(f"<fragment>{html}</fragment>")
    except (PlumeError, OSError, etree.XMLSyntaxError) as exc:
        logger.warning("Markdown conversion failed, keeping raw code block: %s", exc)
        code.add_text(source)
        return code

    code.children.extend(fragment.children)
    return code


def parse_xml_post(content: str) -> Element:
    """Parse an XML post, wrapping legacy loose content after ``</meta>``.

    Raises:
        MarkupError: If the content is not XML even after wrapping.

    """
    try:
        return from_xml(content)
    except etree.XMLSyntaxError as exc:
        boundary = content.find(META_CLOSE)
        if boundary == -1:
            raise MarkupError(f"not a well-formed XML post: {exc}") from exc
        split = boundary + len(META_CLOSE)
        wrapped = f"<document>{content[:split]}<body>{content[split:]}</body></document>"

    try:
        return from_xml(wrapped)
    except etree.XMLSyntaxError as exc:
        raise MarkupError(f"not a well-formed XML post, even after wrapping: {exc}") from exc


def parse_post(content: str, converter: Converter | None = None) -> Element:
    if is_custom_syntax(content):
        return parse_custom_syntax(content, converter)
    return parse_xml_post(content)
