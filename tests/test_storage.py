"""
Upload store tests
"""
import io

import pytest

from pdf_analyzer.errors import UploadNotFound
from pdf_analyzer.services.storage import FileUploadStore, is_valid_file_id, new_file_id


@pytest.fixture()
def store(upload_dir):
    return FileUploadStore(str(upload_dir))


def add_record(store, file_id, text="some text"):
    store.save_upload(file_id, io.BytesIO(b"%PDF-1.4"))
    store.put_text(file_id, text)


class TestFileIds:

    def test_ids_are_unique_and_valid(self):
        ids = {new_file_id() for _ in range(100)}
        assert len(ids) == 100
        assert all(is_valid_file_id(i) for i in ids)

    @pytest.mark.parametrize("bad", ["", "../etc/passwd", "a/b", "x.txt", "id with space"])
    def test_rejects_path_like_ids(self, bad):
        assert not is_valid_file_id(bad)


class TestFileUploadStore:

    def test_text_round_trip(self, store):
        add_record(store, "upload_1", "привет мир")
        assert store.get_text("upload_1") == "привет мир"

    def test_missing_text_is_not_found(self, store):
        with pytest.raises(UploadNotFound):
            store.get_text("upload_missing")

    def test_invalid_id_is_not_found(self, store, upload_dir):
        (upload_dir.parent / "secret.txt").write_text("secret")
        with pytest.raises(UploadNotFound):
            store.get_text("../secret")

    def test_delete_removes_only_that_record(self, store, upload_dir):
        add_record(store, "upload_a")
        add_record(store, "upload_b")

        store.delete("upload_a")

        assert sorted(p.name for p in upload_dir.iterdir()) == ["upload_b", "upload_b.txt"]

    def test_delete_is_best_effort(self, store, upload_dir):
        store.put_text("upload_a", "text only")
        store.delete("upload_a")
        store.delete("upload_never_existed")
        assert list(upload_dir.iterdir()) == []

    def test_clear_removes_everything(self, store, upload_dir):
        add_record(store, "upload_a")
        add_record(store, "upload_b")
        (upload_dir / "stray.bin").write_bytes(b"x")

        store.clear()

        assert list(upload_dir.iterdir()) == []

    def test_discard_upload_keeps_text(self, store, upload_dir):
        add_record(store, "upload_a")
        store.discard_upload("upload_a")
        store.discard_upload("upload_a")
        assert [p.name for p in upload_dir.iterdir()] == ["upload_a.txt"]

    def test_read_after_concurrent_cleanup(self, store):
        add_record(store, "upload_a")
        assert store.get_text("upload_a") == "some text"
        store.delete("upload_a")
        with pytest.raises(UploadNotFound):
            store.get_text("upload_a")
