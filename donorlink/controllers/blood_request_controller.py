from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import current_user, get_current_user, jwt_required

from donorlink.auth import admin_required
from donorlink.controllers import get_json_body
from donorlink.errors import PermissionDeniedError
from donorlink.services import request_lifecycle

# Define the Blueprint for blood requests
blood_request_bp = Blueprint('blood_request_bp', __name__)


@blood_request_bp.route('/', methods=['POST'])
@jwt_required(optional=True)
def create_blood_request():
    # Anonymous visitors may submit requests too
    blood_request = request_lifecycle.create_request(get_json_body(), requester=get_current_user())
    return jsonify(blood_request.to_dict()), 201


@blood_request_bp.route('/', methods=['GET'])
@admin_required
def get_blood_requests():
    requests = request_lifecycle.list_requests(
        status=request.args.get('status'),
        urgency=request.args.get('urgency'),
    )
    return jsonify([r.to_dict() for r in requests]), 200


@blood_request_bp.route('/mine', methods=['GET'])
@jwt_required()
def get_my_blood_requests():
    grouped = request_lifecycle.list_requests_for_user(current_user)
    return jsonify({key: [r.to_dict() for r in rows] for key, rows in grouped.items()}), 200


@blood_request_bp.route('/<int:id>', methods=['GET'])
@jwt_required()
def get_blood_request(id):
    blood_request = request_lifecycle.get_request(id)
    involved = (
        current_user.is_admin
        or blood_request.requester_id == current_user.id
        or blood_request.donor_id is None
        or (blood_request.donor is not None and blood_request.donor.user_id == current_user.id)
    )
    if not involved:
        raise PermissionDeniedError('You cannot view this request')
    return jsonify(blood_request.to_dict()), 200


@blood_request_bp.route('/<int:id>/approve', methods=['POST'])
@jwt_required()
def approve_blood_request(id):
    blood_request, donation, eligible_again = request_lifecycle.approve_request(
        id, current_user.id, cooldown_days=current_app.config['DONATION_COOLDOWN_DAYS'],
    )
    return jsonify({
        'request': blood_request.to_dict(),
        'donation': donation.to_dict(),
        'next_eligible_date': eligible_again.isoformat(),
    }), 200


@blood_request_bp.route('/<int:id>/reject', methods=['POST'])
@jwt_required()
def reject_blood_request(id):
    blood_request = request_lifecycle.reject_request(id, current_user.id)
    return jsonify(blood_request.to_dict()), 200


@blood_request_bp.route('/<int:id>/complete', methods=['POST'])
@jwt_required()
def complete_blood_request(id):
    blood_request = request_lifecycle.complete_request(id, current_user)
    return jsonify(blood_request.to_dict()), 200
