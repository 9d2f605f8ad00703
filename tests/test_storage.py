"""Tests for label_tycoon.storage.JsonStorage."""

import json

import pytest

from label_tycoon.models import Artist, GameState, Project, Song
from label_tycoon.storage import JsonStorage, StorageError


def _song(n: int, released: bool = False) -> Song:
    return Song(
        id=f"p1-s{n}", game_id="g1", project_id="p1", artist_id="a1",
        title=f"Track {n}", quality=60, created_turn=1, is_released=released,
        release_turn=1 if released else None,
    )


def _project(**kw) -> Project:
    fields = dict(id="p1", game_id="g1", artist_id="a1", title="Debut", type="single", song_count=1)
    fields.update(kw)
    return Project(**fields)


class TestGameState:
    def test_save_and_load(self, store: JsonStorage) -> None:
        store.save_game_state(GameState(id="g1", money=123, reputation=9))
        loaded = store.get_game_state("g1")
        assert loaded.money == 123
        assert loaded.reputation == 9

    def test_missing_game_returns_none(self, store: JsonStorage) -> None:
        assert store.get_game_state("nope") is None


class TestArtists:
    def test_upsert_and_lookup(self, store: JsonStorage, artist: Artist) -> None:
        assert store.get_artist_by_id("a1").name == "Nova"
        store.save_artist(artist.model_copy(update={"name": "Nova R."}))
        assert store.get_artist_by_id("a1").name == "Nova R."
        assert len(store.get_artists_for_game("g1")) == 1

    def test_update_artist_patch(self, store: JsonStorage, artist: Artist) -> None:
        updated = store.update_artist("a1", {"mood": 80})
        assert updated.mood == 80
        assert store.get_artist_by_id("a1").mood == 80

    def test_update_missing_artist(self, store: JsonStorage) -> None:
        with pytest.raises(StorageError):
            store.update_artist("ghost", {"mood": 1})

    def test_artists_filtered_by_game(self, store: JsonStorage, artist: Artist) -> None:
        store.save_artist(Artist(id="b1", game_id="other", name="B", archetype="Trendsetter"))
        assert [a.id for a in store.get_artists_for_game("g1")] == ["a1"]


class TestProjects:
    def test_create_and_update(self, store: JsonStorage) -> None:
        store.create_project(_project())
        updated = store.update_project("p1", {"stage": "production", "songs_created": 1})
        assert updated.stage == "production"
        assert store.get_projects_for_game("g1")[0].songs_created == 1

    def test_duplicate_project_rejected(self, store: JsonStorage) -> None:
        store.create_project(_project())
        with pytest.raises(StorageError):
            store.create_project(_project())

    def test_active_excludes_released(self, store: JsonStorage) -> None:
        store.create_project(_project(id="p2"))
        store.create_project(_project(id="p1", stage="released"))
        store.create_project(_project(id="p0", stage="marketing"))
        assert [p.id for p in store.get_active_recording_projects_for_game("g1")] == ["p0", "p2"]


class TestSongs:
    def test_create_and_query(self, store: JsonStorage) -> None:
        store.create_song(_song(1))
        store.create_song(_song(2, released=True))
        assert len(store.get_songs_for_project("p1")) == 2
        assert [s.id for s in store.get_released_songs_for_game("g1")] == ["p1-s2"]

    def test_update_songs_batch(self, store: JsonStorage) -> None:
        store.create_song(_song(1))
        store.create_song(_song(2))
        store.update_songs([
            _song(1).model_copy(update={"total_streams": 10}),
            _song(2).model_copy(update={"total_streams": 20}),
        ])
        streams = {s.id: s.total_streams for s in store.get_songs_for_project("p1")}
        assert streams == {"p1-s1": 10, "p1-s2": 20}

    def test_update_unknown_song_fails(self, store: JsonStorage) -> None:
        store.create_song(_song(1))
        with pytest.raises(StorageError):
            store.update_songs([_song(9)])


class TestTransaction:
    def test_commit_writes_files(self, store: JsonStorage, tmp_path) -> None:
        with store.transaction():
            store.create_song(_song(1))
            assert not (tmp_path / "data" / "songs.json").exists()
            # reads inside the transaction see staged writes
            assert len(store.get_songs_for_project("p1")) == 1
        data = json.loads((tmp_path / "data" / "songs.json").read_text())
        assert data[0]["id"] == "p1-s1"

    def test_rollback_discards_writes(self, store: JsonStorage, artist: Artist) -> None:
        with pytest.raises(RuntimeError):
            with store.transaction():
                store.update_artist("a1", {"mood": 99})
                store.create_song(_song(1))
                raise RuntimeError("boom")
        assert store.get_artist_by_id("a1").mood == 50
        assert store.get_songs_for_project("p1") == []

    def test_nested_transaction_rejected(self, store: JsonStorage) -> None:
        with store.transaction():
            with pytest.raises(StorageError):
                with store.transaction():
                    pass

    def test_corrupt_file_raises_storage_error(self, store: JsonStorage, tmp_path) -> None:
        (tmp_path / "data" / "songs.json").write_text("{not json")
        with pytest.raises(StorageError):
            store.get_songs_for_project("p1")


class TestDeleteGame:
    def test_removes_only_that_game(self, store: JsonStorage, artist: Artist) -> None:
        store.save_game_state(GameState(id="g1"))
        store.create_project(_project())
        store.create_song(_song(1))
        store.save_artist(Artist(id="b1", game_id="other", name="B", archetype="Trendsetter"))

        store.delete_game("g1")

        assert store.get_game_state("g1") is None
        assert store.get_artists_for_game("g1") == []
        assert store.get_projects_for_game("g1") == []
        assert store.get_songs_for_project("p1") == []
        assert store.get_artist_by_id("b1") is not None
