from pathlib import Path

import pytest

from plume.core.exceptions import AddressOverflowError, RegistryError
from plume.core.registry import Registry, format_address


@pytest.mark.parametrize(
    ("identifier", "address"),
    [(1, "0x0001"), (255, "0x00ff"), (4096, "0x1000"), (65535, "0xffff")],
)
def test_format_address(identifier: int, address: str):
    assert format_address(identifier) == address


def test_format_address_rejects_overflow():
    with pytest.raises(AddressOverflowError):
        format_address(65536)


@pytest.mark.parametrize("identifier", [0, -1])
def test_format_address_rejects_non_positive_ids(identifier: int):
    with pytest.raises(ValueError, match="start at 1"):
        format_address(identifier)


def test_load_missing_file_returns_empty_registry(tmp_path: Path):
    registry = Registry.load(tmp_path / "lock.xml")
    assert len(registry) == 0


def test_assure_mints_sequential_ids(registry: Registry):
    assert registry.assure("POST:a") == 1
    assert registry.assure("POST:b") == 2
    assert registry.assure("TAG:x") == 3


def test_assure_is_idempotent(registry: Registry):
    first = registry.assure("POST:a")
    registry.assure("POST:b")
    assert registry.assure("POST:a") == first
    assert len(registry) == 2


def test_ids_survive_save_and_reload(tmp_path: Path):
    path = tmp_path / "lock.xml"
    registry = Registry(path)
    registry.assure("POST:a")
    registry.assure("TAG:news")
    registry.save()

    reloaded = Registry.load(path)
    assert reloaded.lookup("TAG:news") == 2
    assert reloaded.assure("POST:a") == 1
    # new keys continue after the persisted ones
    assert reloaded.assure("POST:c") == 3


def test_save_writes_lock_document(tmp_path: Path):
    path = tmp_path / "lock.xml"
    registry = Registry(path)
    registry.assure("POST:hello.txt")
    registry.save()

    text = path.read_text(encoding="utf-8")
    assert "<lock>" in text
    assert '<key id="1" value="POST:hello.txt"/>' in text
    assert not list(tmp_path.glob("*.tmp"))


def test_save_overwrites_previous_file(tmp_path: Path):
    path = tmp_path / "lock.xml"
    path.write_text('<lock><key id="1" value="POST:old"/></lock>', encoding="utf-8")
    registry = Registry.load(path)
    registry.assure("POST:new")
    registry.save()

    assert [key.value for key in Registry.load(path)] == ["POST:old", "POST:new"]


def test_load_rejects_non_numeric_id(tmp_path: Path):
    path = tmp_path / "lock.xml"
    path.write_text('<lock><key id="one" value="POST:a"/></lock>', encoding="utf-8")

    with pytest.raises(RegistryError, match="invalid id 'one'"):
        Registry.load(path)


def test_load_rejects_malformed_xml(tmp_path: Path):
    path = tmp_path / "lock.xml"
    path.write_text("<lock><key", encoding="utf-8")

    with pytest.raises(RegistryError):
        Registry.load(path)


def test_load_rejects_unexpected_root(tmp_path: Path):
    path = tmp_path / "lock.xml"
    path.write_text("<keys/>", encoding="utf-8")

    with pytest.raises(RegistryError, match="expected <lock> root"):
        Registry.load(path)


@pytest.mark.parametrize("raw_id", ["0", "-1"])
def test_load_rejects_non_positive_id(tmp_path: Path, raw_id: str):
    path = tmp_path / "lock.xml"
    path.write_text(f'<lock><key id="{raw_id}" value="POST:a"/></lock>', encoding="utf-8")

    with pytest.raises(RegistryError, match=f"invalid id '{raw_id}'"):
        Registry.load(path)
