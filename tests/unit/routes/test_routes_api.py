import io

import pytest


def _seed(app, *keys):
    with app.app_context():
        catalog = app.extensions['catalog']
        return [catalog.insert_parsed(key).id for key in keys]


@pytest.mark.unit
def test_list_tracks_sorted_with_playable_urls(app, client):
    _seed(app, 'Zed - Beta.mp3', 'Alpha.mp3')

    r = client.get('/api/tracks')
    assert r.status_code == 200
    data = r.get_json()
    assert data['count'] == 2
    assert [t['title'] for t in data['tracks']] == ['Alpha', 'Beta']
    assert data['tracks'][1]['artist'] == 'Zed'
    assert data['tracks'][1]['playable_url'] == 'https://pub-test.r2.dev/Zed%20-%20Beta.mp3'


@pytest.mark.unit
def test_get_track_and_missing_track(app, client):
    (track_id,) = _seed(app, 'Solo.mp3')

    assert client.get(f'/api/tracks/{track_id}').get_json()['track']['title'] == 'Solo'

    r = client.get('/api/tracks/999999')
    assert r.status_code == 404
    assert r.get_json()['error'] == 'not_found'


@pytest.mark.unit
def test_create_playlist_merges_and_reports_existing(app, client):
    a, b = _seed(app, 'a.mp3', 'b.mp3')

    r = client.post('/api/playlists', json={'name': 'Gym', 'track_ids': [a]})
    assert r.status_code == 201
    playlist_id = r.get_json()['playlist']['id']

    r = client.post('/api/playlists', json={'name': 'Gym', 'track_ids': [b, a]})
    assert r.status_code == 200
    body = r.get_json()['playlist']
    assert body['id'] == playlist_id
    assert [t['id'] for t in body['tracks']] == [a, b]


@pytest.mark.unit
@pytest.mark.parametrize(
    'payload',
    [{}, {'name': '   '}, {'name': 123}, {'name': ['x']}, {'name': 'Gym', 'track_ids': 'nope'}, ['Gym']],
)
def test_create_playlist_validation_errors(client, payload):
    r = client.post('/api/playlists', json=payload)
    assert r.status_code == 400
    assert r.get_json()['error'] == 'validation_error'


@pytest.mark.unit
def test_add_tracks_is_idempotent(app, client):
    (track_id,) = _seed(app, 'a.mp3')
    playlist_id = client.post('/api/playlists', json={'name': 'Gym'}).get_json()['playlist']['id']

    for _ in range(2):
        r = client.post(f'/api/playlists/{playlist_id}/tracks', json={'track_id': track_id})
        assert r.status_code == 200

    tracks = client.get(f'/api/playlists/{playlist_id}').get_json()['playlist']['tracks']
    assert [t['id'] for t in tracks] == [track_id]


@pytest.mark.unit
def test_add_unknown_track_is_404_and_leaves_playlist_unchanged(app, client):
    (track_id,) = _seed(app, 'a.mp3')
    playlist_id = client.post('/api/playlists', json={'name': 'Gym'}).get_json()['playlist']['id']

    r = client.post(f'/api/playlists/{playlist_id}/tracks', json={'track_ids': [track_id, 424242]})
    assert r.status_code == 404

    assert client.get(f'/api/playlists/{playlist_id}').get_json()['playlist']['tracks'] == []
    assert client.post('/api/playlists/999999/tracks', json={'track_ids': [track_id]}).status_code == 404


@pytest.mark.unit
def test_put_replaces_contents(app, client):
    a, b = _seed(app, 'a.mp3', 'b.mp3')
    client.post('/api/playlists', json={'name': 'Mix', 'track_ids': [a, b]})

    r = client.put('/api/playlists/Mix', json={'track_ids': [b]})
    assert r.status_code == 200
    assert [t['id'] for t in r.get_json()['playlist']['tracks']] == [b]

    assert client.put('/api/playlists/Mix', json={}).status_code == 400


@pytest.mark.unit
def test_database_mode_get_takes_id_and_put_takes_name(client):
    playlist_id = client.post('/api/playlists', json={'name': 'Mix'}).get_json()['playlist']['id']

    assert client.get(f'/api/playlists/{playlist_id}').status_code == 200
    assert client.get('/api/playlists/Mix').status_code == 404
    assert client.post('/api/playlists/Mix/tracks', json={'track_ids': []}).status_code == 404
    assert client.put('/api/playlists/Mix', json={'track_ids': []}).status_code == 200


@pytest.mark.unit
def test_list_playlists(client):
    client.post('/api/playlists', json={'name': 'b'})
    client.post('/api/playlists', json={'name': 'a'})

    data = client.get('/api/playlists').get_json()
    assert data['count'] == 2
    assert [p['name'] for p in data['playlists']] == ['a', 'b']


@pytest.mark.unit
def test_upload_multipart_creates_tracks_and_playlist(client, object_store):
    r = client.post(
        '/api/uploads',
        data={
            'files': [(io.BytesIO(b'one'), 'Alice - Song1.mp3'), (io.BytesIO(b'two'), 'Loose.mp3')],
            'playlist_name': 'Gym',
        },
        content_type='multipart/form-data',
    )
    assert r.status_code == 201
    data = r.get_json()
    assert data['message'] == 'Uploaded 2 songs to "Gym"'
    assert [t['artist'] for t in data['tracks']] == ['Alice', 'Unknown Artist']
    assert set(object_store.objects) == {'Alice - Song1.mp3', 'Loose.mp3'}


@pytest.mark.unit
def test_upload_rejects_missing_files_and_bad_extensions(client, object_store):
    assert client.post('/api/uploads', data={'playlist_name': 'Gym'}, content_type='multipart/form-data').status_code == 400

    r = client.post(
        '/api/uploads',
        data={'files': [(io.BytesIO(b'x'), 'cover.jpg')]},
        content_type='multipart/form-data',
    )
    assert r.status_code == 400
    assert object_store.put_calls == []


@pytest.mark.unit
def test_upload_put_failure_is_502(client, object_store):
    object_store.fail_puts = True
    r = client.post(
        '/api/uploads',
        data={'files': [(io.BytesIO(b'x'), 'a.mp3')]},
        content_type='multipart/form-data',
    )
    assert r.status_code == 502
    assert r.get_json()['error'] == 'upstream_unavailable'


@pytest.mark.unit
def test_unexpected_error_does_not_leak_details(app, client, monkeypatch):
    def _boom():
        raise RuntimeError('postgresql://admin:hunter2@db/prod')

    monkeypatch.setattr(app.extensions['catalog'], 'list_all', _boom)

    r = client.get('/api/tracks')
    assert r.status_code == 500
    assert r.get_json() == {'error': 'internal_error', 'message': 'Internal server error'}
    assert b'hunter2' not in r.data


@pytest.mark.unit
def test_http_errors_use_json_envelope(client):
    r = client.delete('/api/tracks')
    assert r.status_code == 405
    assert r.get_json()['error'] == 'method_not_allowed'
