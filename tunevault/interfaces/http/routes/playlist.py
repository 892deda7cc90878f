"""Playlist routes.

POST merges into a playlist (created on first use of a name); PUT is the only
way to overwrite one. Repeating either request yields the same state.

In database mode `GET /<playlist_id>` and `POST /<playlist_id>/tracks` take the
integer id while `PUT /<name>` takes the playlist name. In object-store mode
the id is the name, so all three take the name.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from tunevault.domain.playlists import validate_playlist_name
from tunevault.errors import ValidationError


playlist_bp = Blueprint('playlist_bp', __name__, url_prefix='/api/playlists')


def _store():
    return current_app.extensions['playlist_store']


def _json_payload() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    return payload


def _track_ids(payload: dict, *, required: bool = False) -> list:
    track_ids = payload.get('track_ids')
    if track_ids is None and 'track_id' in payload:
        track_ids = [payload['track_id']]
    if track_ids is None:
        if required:
            raise ValidationError('track_ids is required')
        return []
    if not isinstance(track_ids, list):
        raise ValidationError('track_ids must be a list')
    return track_ids


@playlist_bp.route('', methods=['GET'])
def list_playlists():
    playlists = [p.model_dump() for p in _store().list_all()]
    return jsonify({'playlists': playlists, 'count': len(playlists)}), 200


@playlist_bp.route('', methods=['POST'])
def create_playlist():
    payload = _json_payload()
    store = _store()
    track_ids = _track_ids(payload)

    name = validate_playlist_name(payload.get('name'))
    existed = store.find_by_name(name) is not None
    playlist = store.create_or_get_by_name(name)
    if track_ids:
        playlist = store.add_members(playlist.id, track_ids)
    return jsonify({'playlist': playlist.model_dump()}), (200 if existed else 201)


@playlist_bp.route('/<playlist_id>', methods=['GET'])
def get_playlist(playlist_id: str):
    return jsonify({'playlist': _store().get(playlist_id).model_dump()}), 200


@playlist_bp.route('/<name>', methods=['PUT'])
def replace_playlist(name: str):
    payload = _json_payload()
    playlist = _store().replace_contents(name, _track_ids(payload, required=True))
    return jsonify({'playlist': playlist.model_dump()}), 200


@playlist_bp.route('/<playlist_id>/tracks', methods=['POST'])
def add_tracks(playlist_id: str):
    payload = _json_payload()
    playlist = _store().add_members(playlist_id, _track_ids(payload, required=True))
    return jsonify({'playlist': playlist.model_dump()}), 200


__all__ = ['playlist_bp']
