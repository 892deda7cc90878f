"""Multipart upload of audio files into the bucket and a playlist."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from tunevault.domain.uploads import IncomingFile
from tunevault.errors import UpstreamIOError, ValidationError


upload_bp = Blueprint('upload_bp', __name__, url_prefix='/api/uploads')


@upload_bp.route('', methods=['POST'])
def upload_files():
    storages = [f for f in request.files.getlist('files') if f and f.filename]
    if not storages:
        raise ValidationError('At least one file is required')

    playlist_name = request.form.get('playlist_name') or request.form.get('playlistName')
    files = [
        IncomingFile(filename=f.filename, data=f.stream, content_type=f.mimetype)
        for f in storages
    ]
    service = current_app.extensions.get('upload_service')
    if service is None:
        raise UpstreamIOError('Object store is not configured')
    result = service.upload(files, playlist_name)
    return jsonify(
        {
            'success': True,
            'message': f'Uploaded {result.uploaded_count} songs to "{result.playlist.name}"',
            'playlist': result.playlist.model_dump(),
            'tracks': [t.model_dump() for t in result.tracks],
        }
    ), 201


__all__ = ['upload_bp']
