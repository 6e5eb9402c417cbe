"""File store and backup tests"""
from datetime import datetime

from medrecords.filestore import FileStore


def make_store(tmp_path):
    return FileStore(tmp_path / "backup")


def test_read_lines_filters_comments_and_blanks(tmp_path):
    path = tmp_path / "Patient.txt"
    path.write_text("# header\nP001|alice\n\n   \nP002|bob\n")
    store = make_store(tmp_path)
    assert store.read_lines(path) == ["P001|alice", "P002|bob"]
    assert store.read_all_lines(path) == ["# header", "P001|alice", "", "   ", "P002|bob"]


def test_missing_file_reads_empty(tmp_path):
    assert make_store(tmp_path).read_lines(tmp_path / "nope.txt") == []


def test_write_lines_replaces_contents(tmp_path):
    path = tmp_path / "nested" / "Medicine.txt"
    store = make_store(tmp_path)
    assert store.write_lines(path, ["a", "b"], "# header")
    assert store.write_lines(path, ["c"])
    assert path.read_text() == "c\n"
    # No temporary files left behind
    assert [p.name for p in path.parent.iterdir()] == ["Medicine.txt"]


def test_append_and_create(tmp_path):
    path = tmp_path / "Account.txt"
    store = make_store(tmp_path)
    assert store.create_file_if_not_exists(path, "# username")
    assert store.create_file_if_not_exists(path, "# ignored")
    assert store.append_line(path, "alice|h|admin|1|")
    assert store.read_all_lines(path) == ["# username", "alice|h|admin|1|"]


def test_copy_and_delete(tmp_path):
    store = make_store(tmp_path)
    source = tmp_path / "a.txt"
    source.write_text("x\n")
    assert store.copy_file(source, tmp_path / "copy" / "b.txt")
    assert store.file_exists(tmp_path / "copy" / "b.txt")
    assert store.delete_file(source)
    assert not store.delete_file(source)


def test_backup_name_format(tmp_path):
    store = make_store(tmp_path)
    name = store.backup_name(tmp_path / "Medicine.txt", datetime(2026, 3, 10, 9, 5, 7))
    assert name == tmp_path / "backup" / "Medicine.txt_2026-03-10_09-05-07.bak"


def test_backup_of_missing_file_is_skipped(tmp_path):
    assert make_store(tmp_path).create_backup(tmp_path / "missing.txt") is None


def test_restore_picks_latest_backup(tmp_path):
    store = make_store(tmp_path)
    path = tmp_path / "Medicine.txt"
    backup_dir = tmp_path / "backup"
    backup_dir.mkdir()
    (backup_dir / "Medicine.txt_2026-03-09_23-59-59.bak").write_text("old\n")
    (backup_dir / "Medicine.txt_2026-03-10_08-00-00.bak").write_text("newest\n")
    (backup_dir / "Medicine.txt.extra_2027-01-01_00-00-00.bak").write_text("other file\n")
    (backup_dir / "Patient.txt_2030-01-01_00-00-00.bak").write_text("other kind\n")
    path.write_text("broken\n")

    assert store.restore_from_backup(path)
    assert path.read_text() == "newest\n"


def test_restore_without_backup_fails(tmp_path):
    store = make_store(tmp_path)
    path = tmp_path / "Medicine.txt"
    path.write_text("data\n")
    assert not store.restore_from_backup(path)
    assert path.read_text() == "data\n"


def test_backup_then_restore(tmp_path):
    store = make_store(tmp_path)
    path = tmp_path / "Doctor.txt"
    path.write_text("v1\n")
    backup = store.create_backup(path)
    assert backup is not None and backup.read_text() == "v1\n"
    path.write_text("v2\n")
    assert store.restore_from_backup(path)
    assert path.read_text() == "v1\n"
