import hashlib
from pathlib import Path

import pytest

from obsidian_pack import IndexFormat, NotAPackFile, PackFile, PackManager
from obsidian_pack.manager import asset_path_for


@pytest.fixture
def asset_dir(tmp_path: Path, image_data) -> Path:
    root = tmp_path / "assets"
    (root / "images").mkdir(parents=True)
    (root / "images" / "logo.png").write_bytes(image_data)
    (root / "hello.txt").write_text("Hello!")
    (root / "empty.bin").write_bytes(b"")
    return root


@pytest.fixture
def pack_file(tmp_path: Path, image_data) -> Path:
    p = PackFile()
    p.pack_name = "org.example.test"
    p.add_asset(image_data, "logo.png", mime="image/png", metadata={"w": 8})
    p.add_asset_from_string("Hello!", "hello.txt", mime="text/plain")
    path = tmp_path / "test.opak"
    path.write_bytes(p.to_bytes())
    return path


def test_requires_loaded_pack(tmp_path):
    manager = PackManager()

    assert len(manager) == 0
    assert manager.get_current_checksum() == "-"
    with pytest.raises(RuntimeError):
        manager.import_data(b"x", "x")
    with pytest.raises(RuntimeError):
        manager.save()
    with pytest.raises(RuntimeError):
        manager.export_all(tmp_path)


def test_load_from_file(pack_file):
    manager = PackManager()

    assert manager.load_from_file(pack_file) == 2
    assert manager.pack.pack_name == "org.example.test"
    assert list(manager) == ["logo.png", "hello.txt"]
    assert manager.get_asset_info("logo.png") == ("image/png", 192)
    assert not manager.modified
    assert manager.get_loaded_size() == pack_file.stat().st_size
    assert manager.get_loaded_checksum() == hashlib.md5(pack_file.read_bytes()).hexdigest()
    assert manager.get_current_checksum() == manager.get_loaded_checksum()


def test_load_rejects_other_files(tmp_path):
    path = tmp_path / "junk.bin"
    path.write_bytes(b"\x00" * 64)

    with pytest.raises(NotAPackFile):
        PackManager().load_from_file(path)


def test_import_and_remove(pack_file, tmp_path):
    new_file = tmp_path / "notes.txt"
    new_file.write_text("some notes")

    manager = PackManager()
    manager.load_from_file(pack_file)

    assert manager.import_asset(new_file) == "text/plain"
    assert manager.modified
    assert manager.modified_ids == {"notes.txt"}
    assert manager.get_current_checksum() != manager.get_loaded_checksum()

    manager.remove_asset("hello.txt")
    assert list(manager) == ["logo.png", "notes.txt"]
    with pytest.raises(KeyError):
        manager.remove_asset("hello.txt")

    manager.save()
    assert not manager.modified

    reloaded = PackManager()
    reloaded.load_from_file(pack_file)
    assert reloaded.get_asset_data("notes.txt") == b"some notes"
    assert reloaded.pack.get_asset_record("logo.png")["metadata"] == {"w": 8}


def test_export_asset(pack_file, tmp_path, image_data):
    manager = PackManager()
    manager.load_from_file(pack_file)

    out = tmp_path / "out.png"
    manager.export_asset("logo.png", out)
    assert out.read_bytes() == image_data

    with pytest.raises(KeyError):
        manager.export_asset("missing", tmp_path / "missing")


def test_directory_round_trip(asset_dir, tmp_path):
    manager = PackManager()
    manager.create_new("org.example.dir")

    assert manager.import_all(asset_dir) == 3
    assert list(manager) == ["empty.bin", "hello.txt", "images/logo.png"]
    assert manager.get_asset_info("images/logo.png") == ("image/png", 192)
    assert manager.get_asset_info("hello.txt") == ("text/plain", 6)

    out_dir = tmp_path / "out"
    assert manager.export_all(out_dir) == 3
    for name in ("empty.bin", "hello.txt", "images/logo.png"):
        assert (out_dir / name).read_bytes() == (asset_dir / name).read_bytes()


def test_import_all_empty_directory(tmp_path):
    manager = PackManager()
    manager.create_new()
    (tmp_path / "empty").mkdir()

    assert manager.import_all(tmp_path / "empty") == 0


@pytest.mark.parametrize("asset_id", ["", "/etc/passwd", "../outside", "a/../../b"])
def test_asset_path_refuses_escaping_ids(tmp_path, asset_id):
    with pytest.raises(ValueError):
        asset_path_for(asset_id, tmp_path)


def test_save_as_uses_index_format(pack_file, tmp_path):
    manager = PackManager(IndexFormat.JSON)
    manager.load_from_file(pack_file)

    out = tmp_path / "plain.opak"
    manager.save_as(out)

    assert out.read_bytes()[6] == IndexFormat.JSON
    assert manager.file_path == out
    assert PackFile(out.read_bytes()).list_asset_ids() == ["logo.png", "hello.txt"]


def test_data_url(pack_file):
    manager = PackManager()
    manager.load_from_file(pack_file)
    url = manager.to_data_url()

    other = PackManager()
    assert other.load_from_data_url(url) == 2
    assert other.file_path is None
    assert other.get_asset_data("hello.txt") == b"Hello!"


def test_save_keeps_loaded_index_format(tmp_path):
    p = PackFile()
    p.add_asset_from_string("Hello!", "hello.txt")
    path = tmp_path / "plain.opak"
    path.write_bytes(p.to_bytes(IndexFormat.JSON))

    manager = PackManager()
    manager.load_from_file(path)
    assert manager.get_export_format() == IndexFormat.JSON

    manager.import_data(b"more", "more.bin")
    manager.save()
    assert path.read_bytes()[6] == IndexFormat.JSON


def test_import_text(pack_file):
    manager = PackManager()
    manager.load_from_file(pack_file)

    assert manager.import_text("Héllo", "greeting", "text/plain") == "text/plain"
    assert manager.modified_ids == {"greeting"}
    assert manager.get_asset_data("greeting") == "Héllo".encode("utf-8")
