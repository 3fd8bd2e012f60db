"""
Auction API endpoints.

Handles the lot lifecycle, sale resolution, rounds, settings and bidding.
Locking and transactions live in the services; these views only translate
HTTP to service calls.
"""

from flask import jsonify, request, session

from franchise_auction.extensions import limiter
from franchise_auction.routes import api_bp
from franchise_auction.services.allocation_engine import allocation_engine
from franchise_auction.services.bidding_service import bidding_service
from franchise_auction.services.session_service import session_service
from franchise_auction.utils import (
    admin_required,
    error_response,
    get_json_body,
    get_json_with_fields,
    success_response,
    validate_positive_int,
)


@api_bp.route('/auction/state', methods=['GET'])
def auction_state():
    """Current session, player on the block, highest bid and minimum next bid."""
    return jsonify({'success': True, 'state': bidding_service.current_auction_state().to_dict()})


@api_bp.route('/auction/start/<int:player_id>', methods=['POST'])
@admin_required
def start_auction(player_id: int):
    """Put a player on the block."""
    return jsonify(session_service.start_auction(player_id))


@api_bp.route('/auction/end', methods=['POST'])
@admin_required
def end_auction():
    """Close the open lot without selling; the player stays available."""
    return jsonify(session_service.end_auction())


@api_bp.route('/auction/sell/<int:player_id>', methods=['POST'])
@admin_required
def sell_player(player_id: int):
    """Sell the player on the block to the highest bidder."""
    result = allocation_engine.resolve_player_sale(player_id)
    return success_response(result.to_dict(), message=f"{result.player_name} sold to {result.team_name}")


@api_bp.route('/auction/unsold/<int:player_id>', methods=['POST'])
@admin_required
def mark_unsold(player_id: int):
    """Close the open lot with no sale."""
    return jsonify(allocation_engine.mark_unsold(player_id))


@api_bp.route('/auction/advance-round', methods=['POST'])
@admin_required
def advance_round():
    """Start the unsold replay round."""
    return jsonify(session_service.advance_round())


@api_bp.route('/auction/reopen-main', methods=['POST'])
@admin_required
def reopen_main_round():
    """Operator override back to the main round."""
    return jsonify(session_service.reopen_main_round(operator=session.get('username')))


@api_bp.route('/auction/settings', methods=['PUT'])
@admin_required
def update_settings():
    """Update min_bid_increment, unsold_price_reduction_factor or auction_date."""
    data, error = get_json_body()
    if error:
        return error

    return jsonify(session_service.update_settings(
        min_bid_increment=data.get('min_bid_increment'),
        unsold_price_reduction_factor=data.get('unsold_price_reduction_factor'),
        auction_date=data.get('auction_date'),
    ))


@api_bp.route('/auction/reconcile', methods=['GET'])
@admin_required
def reconcile():
    """Report sale and wallet records that do not add up."""
    issues = allocation_engine.reconcile()
    return jsonify({
        'success': True,
        'consistent': not issues,
        'issues': [issue.to_dict() for issue in issues],
    })


@api_bp.route('/bid', methods=['POST'])
@admin_required
@limiter.limit("120 per minute")
def place_bid():
    """Place a bid on the player currently on the block."""
    data, error = get_json_with_fields(['player_id', 'team_id', 'amount'])
    if error:
        return error

    player_id, id_error = validate_positive_int(data['player_id'], 'player_id')
    if id_error:
        return error_response(id_error)
    team_id, id_error = validate_positive_int(data['team_id'], 'team_id')
    if id_error:
        return error_response(id_error)

    return jsonify(bidding_service.place_bid(player_id, team_id, data['amount'])), 201


@api_bp.route('/bids/<int:player_id>', methods=['GET'])
def bid_history(player_id: int):
    """Bid history for a player, most recent first. Optional ?lot=N."""
    lot = request.args.get('lot', type=int)
    return jsonify({
        'success': True,
        'player_id': player_id,
        'bids': bidding_service.bid_history(player_id, lot=lot),
    })
