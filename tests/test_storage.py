import pytest

from iexpense.exceptions import PersistenceError, ValidationError
from iexpense.storage import FileStorage, MemoryStorage


class TestMemoryStorage:
    def test_missing_key_returns_none(self):
        assert MemoryStorage().get("Items") is None

    def test_set_overwrites(self):
        storage = MemoryStorage()
        storage.set("Items", b"[1]")
        storage.set("Items", b"[2]")
        assert storage.get("Items") == b"[2]"

    def test_delete_is_idempotent(self):
        storage = MemoryStorage({"Items": b"[]"})
        storage.delete("Items")
        storage.delete("Items")
        assert storage.get("Items") is None


class TestFileStorage:
    def test_creates_base_directory(self, tmp_path):
        base = tmp_path / "nested" / "data"
        FileStorage(base)
        assert base.is_dir()

    def test_round_trips_bytes_without_leftovers(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("Items", b'[{"a": 1}]')
        assert storage.get("Items") == b'[{"a": 1}]'
        assert sorted(path.name for path in tmp_path.iterdir()) == ["Items.json"]

    def test_missing_key_returns_none(self, tmp_path):
        assert FileStorage(tmp_path).get("Items") is None

    def test_keys_do_not_collide(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("Items", b"[1]")
        storage.set("Archive", b"[2]")
        assert storage.get("Items") == b"[1]"
        assert storage.get("Archive") == b"[2]"

    def test_delete(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("Items", b"[]")
        storage.delete("Items")
        storage.delete("Items")
        assert not storage.path_for("Items").exists()

    @pytest.mark.parametrize("key", ["", "   ", "../Items", "a/b", "a\\b", ".."])
    def test_rejects_unsafe_keys(self, tmp_path, key):
        with pytest.raises(ValidationError):
            FileStorage(tmp_path).get(key)

    def test_unreadable_value_raises_persistence_error(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.path_for("Items").mkdir()
        with pytest.raises(PersistenceError):
            storage.get("Items")

    def test_unwritable_value_raises_persistence_error(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.path_for("Items").mkdir()
        with pytest.raises(PersistenceError):
            storage.set("Items", b"[]")

    def test_base_path_that_is_a_file_raises(self, tmp_path):
        blocker = tmp_path / "data"
        blocker.write_text("not a directory")
        with pytest.raises(PersistenceError):
            FileStorage(blocker)
