from flask import Blueprint, Response, jsonify

from donorlink.auth import admin_required
from donorlink.services import donor_store
from donorlink.services.export import donations_to_csv
from donorlink.services.reporting import dashboard_stats

report_bp = Blueprint('report_bp', __name__)


@report_bp.route('/dashboard', methods=['GET'])
@admin_required
def get_dashboard():
    return jsonify(dashboard_stats()), 200


@report_bp.route('/donations.csv', methods=['GET'])
@admin_required
def export_donations():
    donations = donor_store.list_donations()
    if not donations:
        return jsonify({'error': 'No donations to export'}), 404
    return Response(
        donations_to_csv(donations),
        mimetype='text/csv',
        headers={'Content-Disposition': 'attachment; filename=all-donations.csv'},
    )
