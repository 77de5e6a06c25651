"""File-backed registry of stable identifiers.

Keys are namespaced strings such as ``POST:<filename>`` or ``TAG:<label>``.
The first time a key is assured it receives ``len(entries) + 1``; from then
on the same key always maps to the same integer, across runs, as long as the
lock file is kept.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from lxml import etree

from plume.core.exceptions import AddressOverflowError, RegistryError

logger = logging.getLogger(__name__)

MAX_ADDRESS = 0xFFFF


def format_address(identifier: int) -> str:
    """Render an identifier as ``0x`` followed by four lowercase hex digits.

    >>> format_address(255)
    '0x00ff'
    """
    if identifier < 1:
        raise ValueError(f"identifiers start at 1, got {identifier}")
    if identifier > MAX_ADDRESS:
        raise AddressOverflowError(identifier)
    return f"0x{identifier:04x}"


@dataclass(frozen=True, slots=True)
class Key:
    id: int
    value: str


class Registry:
    """Append-only mapping from stable keys to integer identifiers."""

    def __init__(self, path: Path, keys: list[Key] | None = None) -> None:
        self.path = Path(path)
        self._keys: list[Key] = list(keys or [])

    @classmethod
    def load(cls, path: Path) -> Registry:
        """Read the registry at ``path``; a missing file yields an empty registry."""
        path = Path(path)
        if not path.exists():
            logger.info("No registry at %s, starting empty", path)
            return cls(path)

        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            root = etree.parse(str(path), parser=parser).getroot()
        except etree.XMLSyntaxError as exc:
            raise RegistryError(path, str(exc)) from exc

        if root.tag != "lock":
            raise RegistryError(path, f"expected <lock> root, found <{root.tag}>")

        keys: list[Key] = []
        for element in root.iterfind("key"):
            raw_id = element.get("id", "")
            try:
                key_id = int(raw_id)
            except ValueError as exc:
                raise RegistryError(path, f"invalid id '{raw_id}'") from exc
            if key_id < 1:
                raise RegistryError(path, f"invalid id '{raw_id}', identifiers start at 1")
            keys.append(Key(id=key_id, value=element.get("value", "")))

        logger.debug("Loaded %d registry keys from %s", len(keys), path)
        return cls(path, keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[Key]:
        return iter(self._keys)

    def lookup(self, value: str) -> int | None:
        for key in self._keys:
            if key.value == value:
                return key.id
        return None

    def assure(self, value: str) -> int:
        """Return the identifier for ``value``, minting one if it is new."""
        existing = self.lookup(value)
        if existing is not None:
            return existing

        new_id = len(self._keys) + 1
        self._keys.append(Key(id=new_id, value=value))
        logger.debug("Assigned %s to %s", new_id, value)
        return new_id

    def save(self) -> None:
        """Overwrite the backing file with every key in insertion order."""
        root = etree.Element("lock")
        for key in self._keys:
            etree.SubElement(root, "key", id=str(key.id), value=key.value)
        etree.indent(root, space="    ")
        payload = etree.tostring(root, xml_declaration=True, encoding="UTF-8") + b"\n"

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("Saved %d registry keys to %s", len(self._keys), self.path)
