from functools import wraps

from flask import jsonify
from flask_jwt_extended import current_user, verify_jwt_in_request

from donorlink.extensions import db, jwt
from donorlink.models import User


@jwt.user_identity_loader
def user_identity_lookup(user):
    return str(user.id)


@jwt.user_lookup_loader
def user_lookup_callback(_jwt_header, jwt_data):
    return db.session.get(User, int(jwt_data['sub']))


@jwt.additional_claims_loader
def add_role_claim(user):
    return {'role': user.role}


@jwt.user_lookup_error_loader
def user_lookup_error_callback(_jwt_header, jwt_data):
    return jsonify({'error': 'Account no longer exists'}), 401


def admin_required(fn):
    """Allow the view only for authenticated admins"""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        if not current_user.is_admin:
            return jsonify({'error': 'Admin access required'}), 403
        return fn(*args, **kwargs)
    return wrapper
