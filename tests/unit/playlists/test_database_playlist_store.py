import pytest

from tunevault.database.db_manager import db, Playlist, PlaylistTrack, Track
from tunevault.domain.playlists import DatabasePlaylistStore, unique_track_ids, validate_playlist_name
from tunevault.errors import NotFoundError, ValidationError


@pytest.fixture
def store(catalog):
    return DatabasePlaylistStore(catalog)


@pytest.mark.unit
def test_validate_playlist_name():
    assert validate_playlist_name("  Gym  ") == "Gym"
    for bad in (None, "", "   ", "x" * 256, 123, ["Gym"]):
        with pytest.raises(ValidationError):
            validate_playlist_name(bad)


@pytest.mark.unit
def test_unique_track_ids_dedupes_in_order():
    assert unique_track_ids([3, "1", 3, 2, 1]) == [3, 1, 2]
    with pytest.raises(ValidationError):
        unique_track_ids([True])
    with pytest.raises(ValidationError):
        unique_track_ids(["abc"])


@pytest.mark.unit
def test_create_or_get_by_name_is_idempotent(db_session, store):
    first = store.create_or_get_by_name("Gym")
    second = store.create_or_get_by_name(" Gym ")

    assert first.id == second.id
    assert Playlist.query.count() == 1
    assert store.find_by_name("Gym").id == first.id
    assert store.find_by_name("Nope") is None


@pytest.mark.unit
def test_add_members_twice_keeps_single_membership(db_session, factories, store):
    track = factories.TrackFactory()
    db_session.commit()
    playlist = store.create_or_get_by_name("Gym")

    store.add_members(playlist.id, [track.id])
    again = store.add_members(playlist.id, [track.id, track.id])

    assert again.track_ids == [track.id]
    assert PlaylistTrack.query.filter_by(playlist_id=playlist.id).count() == 1


@pytest.mark.unit
def test_add_members_appends_in_request_order(db_session, factories, store):
    a, b, c = factories.TrackFactory(), factories.TrackFactory(), factories.TrackFactory()
    db_session.commit()
    playlist = store.create_or_get_by_name("Mix")

    store.add_members(playlist.id, [b.id])
    view = store.add_members(playlist.id, [c.id, b.id, a.id])

    assert view.track_ids == [b.id, c.id, a.id]
    assert view.tracks[0].playable_url.startswith("https://pub-test.r2.dev/")


@pytest.mark.unit
def test_add_members_unknown_playlist_or_track(db_session, factories, store):
    track = factories.TrackFactory()
    db_session.commit()
    playlist = store.create_or_get_by_name("Gym")

    with pytest.raises(NotFoundError):
        store.add_members(424242, [track.id])
    with pytest.raises(NotFoundError):
        store.add_members("not-an-id", [track.id])
    with pytest.raises(NotFoundError):
        store.add_members(playlist.id, [track.id, 999999])

    # The unknown id aborts the whole request
    assert store.get(playlist.id).track_ids == []


@pytest.mark.unit
def test_replace_contents_overwrites_and_creates(db_session, factories, store):
    a, b, c = factories.TrackFactory(), factories.TrackFactory(), factories.TrackFactory()
    db_session.commit()

    created = store.replace_contents("Road Trip", [a.id, b.id])
    replaced = store.replace_contents("Road Trip", [c.id, a.id, c.id])

    assert created.id == replaced.id
    assert replaced.track_ids == [c.id, a.id]
    assert store.replace_contents("Road Trip", []).track_ids == []


@pytest.mark.unit
def test_list_all_sorted_by_name(db_session, store):
    for name in ("b", "C", "a"):
        store.create_or_get_by_name(name)
    assert [p.name for p in store.list_all()] == ["C", "a", "b"]


@pytest.mark.unit
def test_deleting_playlist_keeps_tracks(db_session, factories, store):
    track = factories.TrackFactory()
    db_session.commit()
    playlist = store.create_or_get_by_name("Temp")
    store.add_members(playlist.id, [track.id])

    db.session.delete(db.session.get(Playlist, playlist.id))
    db.session.commit()

    assert PlaylistTrack.query.count() == 0
    assert db.session.get(Track, track.id) is not None
