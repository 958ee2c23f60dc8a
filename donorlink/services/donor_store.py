"""Donor and donation persistence; every write runs inside atomic()."""
import logging
from datetime import datetime, timezone

from sqlalchemy import func

from donorlink.errors import NotFoundError, ValidationError
from donorlink.extensions import db
from donorlink.models import BloodRequest, Donation, Donor, User
from donorlink.services.eligibility import COOLDOWN_DAYS, next_eligible_date, utcnow
from donorlink.services.transactions import atomic, store_read
from donorlink.validators import clean_donor_data, parse_int, validate_blood_type

logger = logging.getLogger(__name__)

DONOR_FIELDS = ['name', 'email', 'phone', 'age', 'weight', 'blood_type', 'city', 'address', 'latitude', 'longitude']


def _parse_timestamp(value):
    if value is None or isinstance(value, datetime):
        return value
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError('Dates must be in ISO 8601 format')
    if parsed.tzinfo:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _parse_flag(value, label):
    if not isinstance(value, bool):
        raise ValidationError(f'{label} must be true or false')
    return value


def get_donor(donor_id):
    with store_read('Loading donor'):
        donor = db.session.get(Donor, donor_id)
    if donor is None:
        raise NotFoundError('Donor not found')
    return donor


def get_donor_for_user(user_id):
    with store_read('Loading donor profile'):
        donor = Donor.query.filter_by(user_id=user_id).first()
    if donor is None:
        raise NotFoundError('No donor profile is linked to this account')
    return donor


def list_donors():
    with store_read('Listing donors'):
        return Donor.query.order_by(Donor.created_at.desc(), Donor.id.desc()).all()


def create_donor(data, user_id=None, now=None, cooldown_days=COOLDOWN_DAYS):
    fields = clean_donor_data(data)
    if user_id is not None:
        user_id = parse_int(user_id, 'user_id')
        with store_read('Loading account'):
            if db.session.get(User, user_id) is None:
                raise NotFoundError('User not found')
    last_donation = _parse_timestamp(data.get('last_donation_date'))
    is_eligible = _parse_flag(data.get('is_eligible', True), 'is_eligible')
    now = now or utcnow()

    donor = Donor(
        user_id=user_id,
        is_eligible=is_eligible,
        last_donation_date=last_donation,
        next_eligible_date=next_eligible_date(last_donation, now=now, cooldown_days=cooldown_days),
        created_at=now,
        **fields
    )
    with atomic('Registering donor') as session:
        session.add(donor)
    logger.info('Donor %s registered (user %s)', donor.id, user_id)
    return donor


def update_donor(donor_id, changes):
    donor = get_donor(donor_id)
    merged = {field: getattr(donor, field) for field in DONOR_FIELDS}
    merged.update({k: v for k, v in changes.items() if k in DONOR_FIELDS})
    fields = clean_donor_data(merged)
    is_eligible = changes.get('is_eligible')
    if is_eligible is not None:
        _parse_flag(is_eligible, 'is_eligible')

    with atomic('Updating donor'):
        for field, value in fields.items():
            setattr(donor, field, value)
        if is_eligible is not None:
            donor.is_eligible = is_eligible
    logger.info('Donor %s updated', donor.id)
    return donor


def delete_donor(donor_id):
    donor = get_donor(donor_id)
    with atomic('Deleting donor') as session:
        # Pending requests aimed at this donor must not turn into open requests
        BloodRequest.query.filter_by(donor_id=donor.id, status='pending').update(
            {'status': 'rejected'}, synchronize_session='fetch')
        session.delete(donor)
    logger.info('Donor %s deleted', donor_id)


def list_eligible_donors(blood_type=None, city=None):
    query = Donor.query.filter(Donor.is_eligible.is_(True))
    if blood_type:
        query = query.filter(Donor.blood_type == validate_blood_type(blood_type))
    if city and city.strip():
        query = query.filter(func.lower(Donor.city).contains(city.strip().lower(), autoescape=True))
    with store_read('Listing eligible donors'):
        return query.order_by(Donor.created_at.desc(), Donor.id.desc()).all()


def donation_count_by_donor(donor_ids):
    donor_ids = list(donor_ids)
    if any(isinstance(i, bool) or not isinstance(i, int) for i in donor_ids):
        raise ValidationError('Donor ids must be whole numbers')
    donor_ids = set(donor_ids)
    if not donor_ids:
        return {}
    with store_read('Counting donations'):
        rows = (db.session.query(Donation.donor_id, func.count(Donation.id))
                .filter(Donation.donor_id.in_(donor_ids))
                .group_by(Donation.donor_id)
                .all())
    counts = dict.fromkeys(donor_ids, 0)
    counts.update({donor_id: count for donor_id, count in rows})
    return counts


def list_donations(donor_id=None):
    query = Donation.query
    if donor_id is not None:
        query = query.filter_by(donor_id=donor_id)
    with store_read('Listing donations'):
        return query.order_by(Donation.date.desc(), Donation.id.desc()).all()


def add_donation(donor_id, now=None, cooldown_days=COOLDOWN_DAYS, idempotency_key=None):
    """Log a donation made outside the request flow (admin action).

    With an ``idempotency_key``, repeating the call returns the donation
    created by the first call instead of recording a second one.
    """
    donor = get_donor(donor_id)
    if idempotency_key:
        with store_read('Checking idempotency key'):
            existing = Donation.query.filter_by(idempotency_key=idempotency_key).first()
        if existing is not None:
            if existing.donor_id != donor.id:
                raise ValidationError('Idempotency key was already used for another donor')
            logger.info('Donation %s replayed for key %s', existing.id, idempotency_key)
            return existing

    now = now or utcnow()
    donation = Donation(
        donor_id=donor.id,
        request_id=None,
        recipient_name=donor.name,
        blood_type=donor.blood_type,
        city=donor.city,
        date=now,
        status='completed',
        idempotency_key=idempotency_key,
    )
    with atomic('Adding donation') as session:
        session.add(donation)
        donor.last_donation_date = now
        donor.next_eligible_date = next_eligible_date(now, cooldown_days=cooldown_days)
    logger.info('Donation %s added for donor %s', donation.id, donor.id)
    return donation


def reset_donations(donor_id, now=None):
    donor = get_donor(donor_id)
    with atomic('Resetting donations'):
        deleted = Donation.query.filter_by(donor_id=donor.id).delete(synchronize_session='fetch')
        donor.last_donation_date = None
        donor.next_eligible_date = now or utcnow()
    logger.info('Removed %d donation(s) for donor %s', deleted, donor.id)
    return deleted
