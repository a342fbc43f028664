from __future__ import annotations

import io
from pathlib import Path

from pdf_to_image.capabilities import NATIVE_FS_ENV, detect_capabilities
from pdf_to_image.preferences import (
    JsonPreferenceStore,
    MemoryPreferenceStore,
    SAVE_PATH_KEY,
    preferred_save_dir,
)


class FakeTTY(io.StringIO):
    def isatty(self) -> bool:
        return True


def test_json_store_round_trip(tmp_path: Path) -> None:
    store = JsonPreferenceStore(tmp_path / "config" / "preferences.json")
    assert store.get(SAVE_PATH_KEY) is None

    store.set(SAVE_PATH_KEY, "/data/out")

    reopened = JsonPreferenceStore(tmp_path / "config" / "preferences.json")
    assert reopened.get(SAVE_PATH_KEY) == "/data/out"

    reopened.clear(SAVE_PATH_KEY)
    assert store.get(SAVE_PATH_KEY) is None


def test_json_store_keeps_other_keys(tmp_path: Path) -> None:
    store = JsonPreferenceStore(tmp_path / "preferences.json")
    store.set("theme", "dark")
    store.set(SAVE_PATH_KEY, "/out")
    store.clear(SAVE_PATH_KEY)
    assert store.get("theme") == "dark"


def test_json_store_ignores_malformed_file(tmp_path: Path) -> None:
    path = tmp_path / "preferences.json"
    path.write_text("{not json")
    assert JsonPreferenceStore(path).get(SAVE_PATH_KEY) is None

    path.write_text("[1, 2]")
    assert JsonPreferenceStore(path).get(SAVE_PATH_KEY) is None


def test_json_store_default_location(tmp_path: Path) -> None:
    store = JsonPreferenceStore.default(tmp_path)
    assert store.path == tmp_path / "preferences.json"


def test_preferred_save_dir_falls_back_to_cwd(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert preferred_save_dir(MemoryPreferenceStore()) == Path.cwd()
    assert preferred_save_dir(MemoryPreferenceStore({SAVE_PATH_KEY: "/srv"})) == Path("/srv")


def test_capabilities_env_override() -> None:
    tty = FakeTTY()
    assert detect_capabilities({NATIVE_FS_ENV: "1"}, io.StringIO(), io.StringIO()).native_filesystem
    assert not detect_capabilities({NATIVE_FS_ENV: "false"}, tty, tty).native_filesystem


def test_capabilities_from_terminal() -> None:
    tty = FakeTTY()
    assert detect_capabilities({}, tty, tty).native_filesystem
    assert not detect_capabilities({}, tty, io.StringIO()).native_filesystem
    # repeated calls give the same answer
    assert detect_capabilities({}, tty, tty) == detect_capabilities({}, tty, tty)
