"""Catalog read routes."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from tunevault.errors import NotFoundError


tracks_bp = Blueprint('tracks_bp', __name__, url_prefix='/api/tracks')


def _catalog():
    return current_app.extensions['catalog']


@tracks_bp.route('', methods=['GET'])
def list_tracks():
    catalog = _catalog()
    tracks = [catalog.to_view(t).model_dump() for t in catalog.list_all()]
    return jsonify({'tracks': tracks, 'count': len(tracks)}), 200


@tracks_bp.route('/<int:track_id>', methods=['GET'])
def get_track(track_id: int):
    catalog = _catalog()
    track = catalog.get_by_id(track_id)
    if track is None:
        raise NotFoundError(f'Track {track_id} not found')
    return jsonify({'track': catalog.to_view(track).model_dump()}), 200


__all__ = ['tracks_bp']
