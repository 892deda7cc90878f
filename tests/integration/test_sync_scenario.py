"""End-to-end: bucket -> sync -> catalog -> playlist -> incremental sync."""

import pytest


@pytest.mark.integration
def test_sync_then_playlist_then_incremental_sync(client, object_store):
    object_store.add('Alice - Song1.mp3', 'NoSeparator.mp3')

    first = client.post('/api/sync').get_json()
    assert first['added_count'] == 2

    tracks = client.get('/api/tracks').get_json()['tracks']
    assert [(t['title'], t['artist']) for t in tracks] == [
        ('NoSeparator', 'Unknown Artist'),
        ('Song1', 'Alice'),
    ]
    ids = [t['id'] for t in tracks]

    created = client.post('/api/playlists', json={'name': 'Gym', 'track_ids': ids})
    assert created.status_code == 201
    playlist_id = created.get_json()['playlist']['id']

    object_store.add('Bob - Song2.mp3')
    second = client.post('/api/sync').get_json()
    assert second['added_count'] == 1
    assert second['skipped_count'] == 2

    after = {t['id']: t for t in client.get('/api/tracks').get_json()['tracks']}
    assert len(after) == 3
    for original in tracks:
        assert after[original['id']] == original

    playlist = client.get(f'/api/playlists/{playlist_id}').get_json()['playlist']
    assert [t['id'] for t in playlist['tracks']] == ids


@pytest.mark.integration
def test_upload_then_sync_does_not_duplicate(client, object_store):
    import io

    r = client.post(
        '/api/uploads',
        data={'files': [(io.BytesIO(b'x'), 'Cara - Live.mp3')]},
        content_type='multipart/form-data',
    )
    assert r.status_code == 201
    assert r.get_json()['playlist']['name'] == 'New Upload'

    result = client.post('/api/sync').get_json()
    assert result['added_count'] == 0
    assert result['skipped_count'] == 1
    assert client.get('/api/tracks').get_json()['count'] == 1
