# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import json
from pathlib import Path

import pytest

from resetcore.appdata.paths import HostEnvironment, resolve_record_path
from resetcore.errors import UnsupportedPlatform, WriteFailed
from resetcore.identity.generator import OWNED_KEYS, IdentityTriple, generate
from resetcore.identity.store import IdentityStore


def _store(env: HostEnvironment) -> IdentityStore:
    return IdentityStore(env, "Cursor")


def test_resolve_path_windows_uses_roaming_appdata(tmp_path):
    env = HostEnvironment(platform="win32", home=tmp_path, env={"APPDATA": str(tmp_path / "Roaming")})

    path = _store(env).resolve_path()

    assert path == tmp_path / "Roaming" / "Cursor" / "User" / "globalStorage" / "storage.json"


def test_resolve_path_windows_without_appdata_falls_back_to_home(tmp_path):
    env = HostEnvironment(platform="win32", home=tmp_path, env={})

    path = _store(env).resolve_path()

    assert path == tmp_path / "AppData" / "Roaming" / "Cursor" / "User" / "globalStorage" / "storage.json"


def test_resolve_path_macos(tmp_path):
    env = HostEnvironment(platform="darwin", home=tmp_path)

    path = _store(env).resolve_path()

    assert path == (
        tmp_path / "Library" / "Application Support" / "Cursor" / "User" / "globalStorage" / "storage.json"
    )


def test_resolve_path_linux(linux_env):
    path = _store(linux_env).resolve_path()

    assert path == linux_env.home / ".config" / "Cursor" / "User" / "globalStorage" / "storage.json"


def test_resolve_path_unsupported_platform(tmp_path):
    env = HostEnvironment(platform="sunos5", home=tmp_path)

    with pytest.raises(UnsupportedPlatform):
        _store(env).resolve_path()


def test_resolve_path_override_wins(tmp_path):
    env = HostEnvironment(platform="sunos5", home=tmp_path)
    target = tmp_path / "custom.json"

    assert resolve_record_path(env, "Cursor", str(target)) == target
    assert IdentityStore(env, "Cursor", str(target)).resolve_path() == target


def test_load_missing_record_is_empty(tmp_path, linux_env):
    assert _store(linux_env).load(tmp_path / "absent.json") == {}


@pytest.mark.parametrize(
    "payload",
    [b'{"foo": "ba', b"\xff\xfe\x00garbage", b"[1, 2, 3]", b'"just a string"', b""],
)
def test_load_corrupt_record_is_empty(tmp_path, linux_env, payload):
    path = tmp_path / "storage.json"
    path.write_bytes(payload)

    assert _store(linux_env).load(path) == {}


def test_merge_preserves_foreign_keys(tmp_path, linux_env):
    path = tmp_path / "storage.json"
    original = {
        "foo": "bar",
        "telemetry.machineId": "old",
        "nested": {"a": [1, 2, {"b": None}]},
        "flag": True,
        "count": 3.5,
    }
    triple = generate()

    merged = _store(linux_env).merge_and_save(dict(original), triple, path)

    for key, value in original.items():
        if key not in OWNED_KEYS:
            assert merged[key] == value
    assert merged["telemetry.machineId"] == triple.machine_id
    assert merged["telemetry.machineId"] != "old"
    assert set(merged) == set(original) | set(OWNED_KEYS)


def test_merge_does_not_mutate_input(tmp_path, linux_env):
    record = {"foo": "bar"}

    _store(linux_env).merge_and_save(record, generate(), tmp_path / "storage.json")

    assert record == {"foo": "bar"}


def test_round_trip_write_then_load(tmp_path, linux_env):
    store = _store(linux_env)
    path = tmp_path / "deep" / "dir" / "storage.json"

    merged = store.merge_and_save({"foo": "bar", "名前": "値"}, generate(), path)

    assert store.load(path) == merged
    text = path.read_text(encoding="utf-8")
    assert "名前" in text
    assert text.startswith('{\n  "')


def test_written_record_from_empty_has_exactly_owned_keys(tmp_path, linux_env):
    path = tmp_path / "storage.json"
    triple = IdentityTriple("1" * 64, "2" * 64, "3")

    _store(linux_env).merge_and_save({}, triple, path)

    assert json.loads(path.read_text(encoding="utf-8")) == triple.as_record_fields()


def test_write_failure_is_wrapped(tmp_path, linux_env):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    path = blocker / "storage.json"

    with pytest.raises(WriteFailed) as excinfo:
        _store(linux_env).merge_and_save({}, generate(), path)

    assert isinstance(excinfo.value.__cause__, OSError)
