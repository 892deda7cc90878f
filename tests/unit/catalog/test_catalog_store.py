import pytest

from tunevault.errors import ConflictError, NotFoundError, ValidationError


@pytest.mark.unit
def test_insert_duplicate_source_key_raises_conflict(db_session, catalog):
    catalog.insert("Alice - Song1.mp3", "Song1", "Alice")

    with pytest.raises(ConflictError):
        catalog.insert("Alice - Song1.mp3", "Other", "Someone")

    # Session is still usable after the rejected insert
    assert catalog.find_by_source_key("Alice - Song1.mp3").title == "Song1"


@pytest.mark.unit
def test_insert_requires_source_key(db_session, catalog):
    with pytest.raises(ValidationError):
        catalog.insert("", "Title")


@pytest.mark.unit
def test_list_all_orders_by_title_then_key(db_session, factories, catalog):
    factories.TrackFactory(source_key="b.mp3", title="Same")
    factories.TrackFactory(source_key="a.mp3", title="Same")
    factories.TrackFactory(source_key="z.mp3", title="Alpha")
    db_session.commit()

    assert [t.source_key for t in catalog.list_all()] == ["z.mp3", "a.mp3", "b.mp3"]


@pytest.mark.unit
def test_get_many_keeps_requested_order_and_rejects_unknown(db_session, factories, catalog):
    first = factories.TrackFactory()
    second = factories.TrackFactory()
    db_session.commit()

    assert [t.id for t in catalog.get_many([second.id, first.id])] == [second.id, first.id]
    assert catalog.get_many([]) == []
    with pytest.raises(NotFoundError):
        catalog.get_many([first.id, 999999])


@pytest.mark.unit
def test_ensure_track_creates_once(db_session, catalog):
    track, created = catalog.ensure_track("Bob - Tune (SPOTISAVER).mp3")
    assert created is True
    assert (track.title, track.artist) == ("Tune", "Bob")

    again, created_again = catalog.ensure_track("Bob - Tune (SPOTISAVER).mp3")
    assert created_again is False
    assert again.id == track.id


@pytest.mark.unit
def test_ensure_track_treats_lost_race_as_existing(db_session, catalog, monkeypatch):
    existing = catalog.insert("race.mp3", "race")
    lookups = []
    real_find = catalog.find_by_source_key

    def stale_then_real(key):
        lookups.append(key)
        # First lookup misses, as if another writer had not committed yet
        return None if len(lookups) == 1 else real_find(key)

    monkeypatch.setattr(catalog, "find_by_source_key", stale_then_real)

    track, created = catalog.ensure_track("race.mp3")
    assert created is False
    assert track.id == existing.id


@pytest.mark.unit
def test_to_view_derives_playable_url(db_session, catalog):
    track = catalog.insert("My Song.mp3", "My Song")
    view = catalog.to_view(track)
    assert view.playable_url == "https://pub-test.r2.dev/My%20Song.mp3"
    assert view.id == track.id
