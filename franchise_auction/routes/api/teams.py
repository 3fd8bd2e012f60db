"""
Team API endpoints.

Team CRUD, squads and audited wallet adjustments.
"""

from flask import jsonify, session

from franchise_auction.routes import api_bp
from franchise_auction.services.team_service import team_service
from franchise_auction.utils import admin_required, error_response, get_json_body, get_json_with_fields


@api_bp.route('/teams', methods=['GET'])
def list_teams():
    """List all teams with wallet and spend figures."""
    return jsonify({'success': True, 'teams': team_service.get_teams()})


@api_bp.route('/teams', methods=['POST'])
@admin_required
def create_team():
    """Create a new team."""
    data, error = get_json_with_fields(['name'])
    if error:
        return error

    result = team_service.create_team(
        name=data['name'],
        owner_name=data.get('owner_name', ''),
        owner_email=data.get('owner_email', ''),
        wallet=data.get('wallet'),
    )
    return jsonify(result), 201


@api_bp.route('/teams/<int:team_id>', methods=['GET'])
def get_team(team_id: int):
    """Get a team with its squad in acquisition order."""
    return jsonify({'success': True, 'team': team_service.get_team_squad(team_id)})


@api_bp.route('/teams/<int:team_id>', methods=['PUT'])
@admin_required
def update_team(team_id: int):
    """Update team name or owner details. The wallet is not editable here."""
    data, error = get_json_body()
    if error:
        return error

    if 'wallet' in data:
        return error_response('Use POST /api/teams/<id>/wallet to adjust a wallet')

    result = team_service.update_team(
        team_id,
        name=data.get('name'),
        owner_name=data.get('owner_name'),
        owner_email=data.get('owner_email'),
    )
    return jsonify(result)


@api_bp.route('/teams/<int:team_id>', methods=['DELETE'])
@admin_required
def delete_team(team_id: int):
    """Delete a team that has no players or bids."""
    return jsonify(team_service.delete_team(team_id))


@api_bp.route('/teams/<int:team_id>/wallet', methods=['POST'])
@admin_required
def adjust_wallet(team_id: int):
    """Credit or debit a team's wallet (audited)."""
    data, error = get_json_with_fields(['delta'])
    if error:
        return error

    result = team_service.adjust_wallet(
        team_id,
        data['delta'],
        reason=str(data.get('reason', '')),
        operator=session.get('username'),
    )
    return jsonify(result)
