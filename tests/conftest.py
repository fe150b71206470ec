"""Shared fixtures: a small NPB-like catalog and alias files under tmp_path."""

import json

import pytest

from scoresheet.models.reference import (
    ClubEntry,
    ReferenceCatalog,
    StadiumEntry,
    TeamEntry,
)
from scoresheet.storage.alias_registry import AliasRegistry
from scoresheet.storage.alias_store import AliasStore
from scoresheet.storage.unknown_registry import UnknownRegistry


@pytest.fixture
def catalog():
    return ReferenceCatalog(
        teams=[
            TeamEntry(id=1, name="阪神タイガース", league="Central", level="First", club_id=10),
            TeamEntry(id=2, name="読売ジャイアンツ", league="Central", level="First", club_id=20),
            TeamEntry(id=11, name="阪神タイガース（ファーム）", league="Western", level="Farm", club_id=10),
            TeamEntry(id=12, name="読売ジャイアンツ（ファーム）", league="Eastern", level="Farm", club_id=20),
        ],
        stadiums=[
            StadiumEntry(id=100, name="阪神甲子園球場"),
            StadiumEntry(id=101, name="東京ドーム", is_dome=True),
        ],
        clubs=[
            ClubEntry(id=10, name="阪神"),
            ClubEntry(id=20, name="読売"),
        ],
    )


@pytest.fixture
def alias_paths(tmp_path):
    data = tmp_path / "data"
    logs = tmp_path / "logs"
    return {
        "base": data / "aliases.json",
        "local": data / "aliases.local.json",
        "reg_log": logs / "alias_registrations.jsonl",
        "audit_log": logs / "alias_audit.jsonl",
        "pending": logs / "pending_aliases",
    }


@pytest.fixture
def write_layer():
    def _write(path, layer):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(layer, ensure_ascii=False), encoding="utf-8")

    return _write


@pytest.fixture
def store(alias_paths):
    return AliasStore(alias_paths["base"], alias_paths["local"])


@pytest.fixture
def registry(alias_paths, store):
    return AliasRegistry(
        alias_paths["base"],
        alias_paths["local"],
        alias_paths["reg_log"],
        alias_paths["audit_log"],
        store=store,
    )


@pytest.fixture
def unknown(alias_paths):
    return UnknownRegistry(alias_paths["pending"])


@pytest.fixture
def read_lines():
    def _read(path):
        return [
            json.loads(line)
            for line in path.read_text(encoding="utf-8").splitlines()
            if line
        ]

    return _read
