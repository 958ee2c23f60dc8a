"""Field checks shared by donor registration, admin donor forms and requests."""
import re

from donorlink.constants import BLOOD_TYPES, URGENCY_LEVELS
from donorlink.errors import ValidationError

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
PHONE_RE = re.compile(r'^[\d+\-\s]{10,20}$')

MIN_AGE = 18
MAX_AGE = 65
MIN_WEIGHT_KG = 50

DONOR_REQUIRED_FIELDS = ['name', 'phone', 'blood_type', 'age', 'city']
REQUEST_REQUIRED_FIELDS = ['requester_name', 'blood_type', 'city', 'contact']


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(data, fields):
    missing = [field for field in fields if _is_blank(data.get(field))]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


def validate_email(email):
    return bool(EMAIL_RE.match(email))


def validate_phone(phone):
    return bool(PHONE_RE.match(phone.strip()))


def validate_address(address):
    return 5 < len(address) < 256


def parse_int(value, label):
    if isinstance(value, bool):
        raise ValidationError(f'{label} must be a whole number')
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f'{label} must be a whole number')


def validate_blood_type(blood_type):
    if blood_type not in BLOOD_TYPES:
        raise ValidationError(f"Invalid blood type. Allowed: {', '.join(BLOOD_TYPES)}")
    return blood_type


def validate_urgency(urgency):
    if urgency not in URGENCY_LEVELS:
        raise ValidationError(f"Invalid urgency level. Allowed: {', '.join(URGENCY_LEVELS)}")
    return urgency


def validate_coordinates(latitude, longitude):
    try:
        latitude = float(latitude)
        longitude = float(longitude)
    except (TypeError, ValueError):
        raise ValidationError('Latitude and longitude must be numbers')
    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        raise ValidationError('Coordinates are out of range')
    return latitude, longitude


def clean_donor_data(data):
    """Validate a donor payload and return the normalized field values.

    Raises ValidationError on the first failing check, before anything is
    written to the database.
    """
    require_fields(data, DONOR_REQUIRED_FIELDS)

    email = (data.get('email') or '').strip() or None
    if email and not validate_email(email):
        raise ValidationError('Invalid email address format.')

    phone = str(data['phone']).strip()
    if not validate_phone(phone):
        raise ValidationError('Invalid phone number.')

    address = (data.get('address') or '').strip() or None
    if address and not validate_address(address):
        raise ValidationError('Address must be between 6-255 characters.')

    age = parse_int(data['age'], 'Age')
    if not MIN_AGE <= age <= MAX_AGE:
        raise ValidationError(f'Age must be a number between {MIN_AGE} and {MAX_AGE}.')

    weight = data.get('weight')
    if _is_blank(weight):
        weight = None
    else:
        weight = parse_int(weight, 'Weight')
        if weight < MIN_WEIGHT_KG:
            raise ValidationError(f'Weight must be at least {MIN_WEIGHT_KG}kg if provided.')

    latitude, longitude = data.get('latitude'), data.get('longitude')
    if latitude is None and longitude is None:
        pass
    elif latitude is None or longitude is None:
        raise ValidationError('Latitude and longitude must be provided together')
    else:
        latitude, longitude = validate_coordinates(latitude, longitude)

    return {
        'name': str(data['name']).strip(),
        'email': email,
        'phone': phone,
        'age': age,
        'weight': weight,
        'blood_type': validate_blood_type(data['blood_type']),
        'city': str(data['city']).strip(),
        'address': address,
        'latitude': latitude,
        'longitude': longitude,
    }
