import logging

from donorlink.constants import USER_ROLES
from donorlink.errors import ConflictError, ValidationError
from donorlink.models import User
from donorlink.services.transactions import atomic, store_read
from donorlink.validators import validate_email, validate_phone

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def create_user(email, password, full_name=None, phone=None, role='user'):
    email = email.strip().lower()
    if not validate_email(email):
        raise ValidationError('Invalid email address format.')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
    if phone and not validate_phone(phone):
        raise ValidationError('Invalid phone number.')
    if role not in USER_ROLES:
        raise ValidationError(f"Invalid role. Allowed: {', '.join(USER_ROLES)}")
    with store_read('Checking account'):
        if User.query.filter_by(email=email).first():
            raise ConflictError('An account with this email already exists')

    user = User(email=email, full_name=full_name, phone=phone, role=role)
    user.set_password(password)
    with atomic('Creating account') as session:
        session.add(user)
    logger.info('Account %s created with role %s', user.id, role)
    return user


def authenticate(email, password):
    with store_read('Loading account'):
        user = User.query.filter_by(email=email.strip().lower()).first()
    if user is None or not user.check_password(password):
        return None
    return user
