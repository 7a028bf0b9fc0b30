"""Song catalog endpoints: create, change info, delete, lyrics, library, info."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from songlibrary.domain.catalog import (
    CatalogError,
    ClientInputError,
    NotFoundError,
)
from songlibrary.interfaces.http.responses import ok
from songlibrary.models.dto import SongInfoPatch

logger = logging.getLogger(__name__)

song_bp = Blueprint('song_bp', __name__, url_prefix='/api')

# Song.id is a 32-bit INTEGER column on Postgres
MAX_SONG_ID = 2**31 - 1


def get_catalog_store():
    return current_app.extensions['catalog_store']


def get_add_song_workflow():
    return current_app.extensions['add_song_workflow']


def _require_song_id() -> int:
    raw = (request.args.get('id') or '').strip()
    try:
        song_id = int(raw)
    except ValueError:
        raise ClientInputError("no id or transmitted incorrectly") from None
    if not 0 < song_id <= MAX_SONG_ID:
        raise ClientInputError(f"id must be an integer between 1 and {MAX_SONG_ID}")
    return song_id


@song_bp.errorhandler(CatalogError)
def _handle_catalog_error(error: CatalogError):
    level = logging.ERROR if error.status_code >= 500 else logging.INFO
    logger.log(
        level,
        "%s %s -> %s: %s",
        request.method,
        request.path,
        error.status_code,
        error.message,
        extra={"operation": request.endpoint, "kind": error.kind},
    )
    return jsonify(error.to_dict()), error.status_code


@song_bp.route('/create-song', methods=['POST'])
def create_song():
    payload = request.get_json(silent=True)
    result = get_add_song_workflow().run(payload)
    return jsonify(ok(id=result.song_id)), 200


@song_bp.route('/change-info', methods=['PUT', 'POST'])
def change_info():
    song_id = _require_song_id()
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ClientInputError("Error decoding request body")
    try:
        patch = SongInfoPatch.model_validate(payload)
    except ValidationError as exc:
        raise ClientInputError(f"invalid song info: {exc.error_count()} error(s)", cause=exc) from exc

    get_catalog_store().update_metadata(song_id, patch)
    return jsonify(ok()), 200


@song_bp.route('/delete-song', methods=['DELETE'])
def delete_song():
    song_id = _require_song_id()
    deleted = get_catalog_store().delete_identity(song_id)
    if not deleted:
        raise NotFoundError("Error deleting song, song id not found")
    return jsonify(ok()), 200


@song_bp.route('/text-song', methods=['GET'])
def text_song():
    song_id = _require_song_id()
    found, text = get_catalog_store().get_text(song_id)
    if not found:
        raise NotFoundError(f"song with id {song_id} not found")
    return jsonify({'id': song_id, 'text': text}), 200


@song_bp.route('/library', methods=['GET'])
def library():
    store = get_catalog_store()
    if 'page' not in request.args and 'per_page' not in request.args:
        return jsonify([entry.to_wire() for entry in store.list_all()]), 200

    page = request.args.get('page', type=int) or 1
    per_page = request.args.get('per_page', type=int)
    return jsonify(store.list_page(page=page, per_page=per_page).to_wire()), 200


@song_bp.route('/info', methods=['GET'])
def song_info():
    group = (request.args.get('group') or '').strip()
    title = (request.args.get('song') or request.args.get('title') or '').strip()
    if not group or not title:
        raise ClientInputError("group and song query parameters are required")

    info = get_catalog_store().find_metadata(group, title)
    if info is None:
        raise NotFoundError(f"no info for song '{title}' by '{group}'")
    return jsonify(info.to_wire()), 200


__all__ = ['song_bp']
