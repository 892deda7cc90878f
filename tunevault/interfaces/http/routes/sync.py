"""Bucket-to-catalog synchronization trigger."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify


sync_bp = Blueprint('sync_bp', __name__, url_prefix='/api/sync')


@sync_bp.route('', methods=['POST'])
def run_sync():
    synchronizer = current_app.extensions['synchronizer']
    result = synchronizer.sync_bucket()
    payload = result.model_dump()
    payload.update({'success': True, 'message': result.message})
    return jsonify(payload), 200


__all__ = ['sync_bp']
