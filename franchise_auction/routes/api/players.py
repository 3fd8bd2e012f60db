"""
Player API endpoints.

Handles player listing, CRUD and roster import.
"""

from flask import jsonify, request

from franchise_auction.routes import api_bp
from franchise_auction.services.import_service import import_service
from franchise_auction.services.player_service import EDITABLE_FIELDS, player_service
from franchise_auction.utils import admin_required, error_response, get_json_body, get_json_with_fields


@api_bp.route('/players', methods=['GET'])
def list_players():
    """List players, optionally filtered with ?status=available|sold|unsold|permanently_unsold."""
    status = request.args.get('status')
    return jsonify({
        'success': True,
        'players': player_service.get_players(status),
        'counts': player_service.get_status_counts(),
    })


@api_bp.route('/players/<int:player_id>', methods=['GET'])
def get_player(player_id: int):
    """Get a single player."""
    return jsonify({'success': True, 'player': player_service.get_player(player_id)})


@api_bp.route('/players', methods=['POST'])
@admin_required
def create_player():
    """Create a new available player."""
    data, error = get_json_with_fields(['name'])
    if error:
        return error

    kwargs = {key: data[key] for key in EDITABLE_FIELDS if data.get(key) is not None}
    result = player_service.create_player(**kwargs)
    return jsonify(result), 201


@api_bp.route('/players/<int:player_id>', methods=['PUT'])
@admin_required
def update_player(player_id: int):
    """Update a player's descriptive fields.

    Status and sale fields are rejected; they change only through the auction.
    """
    data, error = get_json_body()
    if error:
        return error

    return jsonify(player_service.update_player(player_id, data))


@api_bp.route('/players/<int:player_id>', methods=['DELETE'])
@admin_required
def delete_player(player_id: int):
    """Delete a player who was never sold or bid on."""
    return jsonify(player_service.delete_player(player_id))


@api_bp.route('/players/import', methods=['POST'])
@admin_required
def import_players():
    """Import players from an uploaded CSV or Excel roster (form field 'file')."""
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return error_response('No file uploaded')

    result = import_service.import_players(upload)
    return jsonify(result.to_dict()), 201
