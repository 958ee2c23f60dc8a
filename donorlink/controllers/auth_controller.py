from flask import Blueprint, jsonify
from flask_jwt_extended import create_access_token, current_user, jwt_required

from donorlink.controllers import get_json_body
from donorlink.services.accounts import authenticate, create_user
from donorlink.validators import require_fields

auth_bp = Blueprint('auth_bp', __name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    data = get_json_body()
    require_fields(data, ['email', 'password'])
    user = create_user(data['email'], data['password'], data.get('full_name'), data.get('phone'))
    return jsonify({'user': user.to_dict(), 'access_token': create_access_token(identity=user)}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = get_json_body()
    require_fields(data, ['email', 'password'])
    user = authenticate(data['email'], data['password'])
    if user is None:
        return jsonify({'error': 'Invalid email or password'}), 401
    return jsonify({'user': user.to_dict(), 'access_token': create_access_token(identity=user)}), 200


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    return jsonify(current_user.to_dict()), 200
