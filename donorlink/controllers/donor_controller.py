from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import current_user, jwt_required

from donorlink.auth import admin_required
from donorlink.controllers import get_json_body
from donorlink.errors import ConflictError, PermissionDeniedError, ValidationError
from donorlink.services import donor_store
from donorlink.services.donor_search import filter_donors, sort_donors
from donorlink.services.eligibility import eligibility_report
from donorlink.services.nearby import find_nearby_donors

# Define Blueprint for the Donor controller
donor_bp = Blueprint('donor_bp', __name__)


def _cooldown_days():
    return current_app.config['DONATION_COOLDOWN_DAYS']


def _check_owner_or_admin(donor):
    if not current_user.is_admin and donor.user_id != current_user.id:
        raise PermissionDeniedError('You can only access your own donor profile')


@donor_bp.route('/', methods=['GET'])
@admin_required
def get_donors():
    donors = donor_store.list_donors()
    counts = donor_store.donation_count_by_donor(d.id for d in donors)
    rows = [dict(d.to_dict(), donation_count=counts.get(d.id, 0)) for d in donors]

    args = request.args
    rows = filter_donors(
        rows,
        search={'field': args.get('search_field', ''), 'value': args.get('search', '')},
        location={'city': args.get('city', ''), 'address': args.get('address', '')},
        blood_group=args.get('blood_group', 'all'),
    )
    rows = sort_donors(rows, args.get('sort', 'created_at'), args.get('direction', 'desc'))
    return jsonify(rows), 200


@donor_bp.route('/', methods=['POST'])
@admin_required
def create_donor():
    data = get_json_body()
    donor = donor_store.create_donor(data, user_id=data.get('user_id'), cooldown_days=_cooldown_days())
    return jsonify(donor.to_dict()), 201


@donor_bp.route('/register', methods=['POST'])
@jwt_required()
def register_donor():
    """Self-service registration, linked to the caller's account"""
    if current_user.donor is not None:
        raise ConflictError('This account already has a donor profile')
    data = get_json_body()
    data.setdefault('email', current_user.email)
    data.pop('is_eligible', None)
    donor = donor_store.create_donor(data, user_id=current_user.id, cooldown_days=_cooldown_days())
    return jsonify(donor.to_dict()), 201


@donor_bp.route('/me', methods=['GET'])
@jwt_required()
def get_my_donor():
    donor = donor_store.get_donor_for_user(current_user.id)
    data = donor.to_dict()
    data['eligibility'] = eligibility_report(donor, cooldown_days=_cooldown_days())
    return jsonify(data), 200


@donor_bp.route('/eligible', methods=['GET'])
@jwt_required()
def get_eligible_donors():
    donors = donor_store.list_eligible_donors(
        blood_type=request.args.get('blood_type'),
        city=request.args.get('city'),
    )
    return jsonify([d.to_dict() for d in donors]), 200


@donor_bp.route('/nearby', methods=['GET'])
@jwt_required()
def get_nearby_donors():
    if request.args.get('lat') is None or request.args.get('lng') is None:
        raise ValidationError('lat and lng query parameters are required')
    nearby = find_nearby_donors(
        request.args.get('lat'),
        request.args.get('lng'),
        radius_km=request.args.get('radius_km', current_app.config['NEARBY_RADIUS_KM']),
        blood_types=request.args.getlist('blood_type'),
        compatible_with=request.args.get('compatible_with'),
    )
    return jsonify([dict(donor.to_dict(), distance_km=distance) for donor, distance in nearby]), 200


@donor_bp.route('/donation-counts', methods=['POST'])
@admin_required
def get_donation_counts():
    donor_ids = get_json_body().get('donor_ids')
    if not isinstance(donor_ids, list):
        raise ValidationError('donor_ids must be a list')
    counts = donor_store.donation_count_by_donor(donor_ids)
    # JSON object keys are strings
    return jsonify({str(donor_id): count for donor_id, count in counts.items()}), 200


@donor_bp.route('/<int:id>', methods=['GET'])
@jwt_required()
def get_donor(id):
    donor = donor_store.get_donor(id)
    return jsonify(donor.to_dict()), 200


@donor_bp.route('/<int:id>', methods=['PUT'])
@jwt_required()
def update_donor(id):
    donor = donor_store.get_donor(id)
    _check_owner_or_admin(donor)
    data = get_json_body()
    if 'is_eligible' in data and not current_user.is_admin:
        raise PermissionDeniedError('Only admins can change donor eligibility')
    donor = donor_store.update_donor(id, data)
    return jsonify(donor.to_dict()), 200


@donor_bp.route('/<int:id>', methods=['DELETE'])
@admin_required
def delete_donor(id):
    donor_store.delete_donor(id)
    return jsonify({'message': 'Donor deleted successfully'}), 200


@donor_bp.route('/<int:id>/eligibility', methods=['GET'])
@jwt_required()
def get_donor_eligibility(id):
    donor = donor_store.get_donor(id)
    _check_owner_or_admin(donor)
    return jsonify(eligibility_report(donor, cooldown_days=_cooldown_days())), 200


@donor_bp.route('/<int:id>/donations', methods=['GET'])
@jwt_required()
def get_donor_donations(id):
    donor = donor_store.get_donor(id)
    _check_owner_or_admin(donor)
    return jsonify([d.to_dict() for d in donor_store.list_donations(donor.id)]), 200


@donor_bp.route('/<int:id>/donations', methods=['POST'])
@admin_required
def add_donation(id):
    donation = donor_store.add_donation(
        id,
        cooldown_days=_cooldown_days(),
        idempotency_key=request.headers.get('Idempotency-Key'),
    )
    donor = donor_store.get_donor(id)
    return jsonify({'donation': donation.to_dict(), 'donor': donor.to_dict()}), 201


@donor_bp.route('/<int:id>/donations', methods=['DELETE'])
@admin_required
def reset_donations(id):
    deleted = donor_store.reset_donations(id)
    return jsonify({'deleted': deleted, 'donor': donor_store.get_donor(id).to_dict()}), 200
