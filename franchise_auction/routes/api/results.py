"""
Results API endpoints: auction summary and CSV downloads.
"""

from flask import Response, jsonify

from franchise_auction.routes import api_bp
from franchise_auction.services.results_service import results_service


@api_bp.route('/results', methods=['GET'])
def results_summary():
    """Per-team spend and squads."""
    return jsonify({'success': True, **results_service.get_summary()})


@api_bp.route('/results/export/<kind>', methods=['GET'])
def export_results(kind: str):
    """Download sold players or teams as CSV."""
    body = results_service.export_csv(kind)
    return Response(
        body,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename=auction_{kind}.csv'},
    )
