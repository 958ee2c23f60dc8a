"""Blood request state machine: pending -> approved | rejected, approved -> completed."""
import logging

from donorlink.constants import REQUEST_STATUSES, REQUEST_TRANSITIONS, URGENCY_LEVELS
from donorlink.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from donorlink.extensions import db
from donorlink.models import BloodRequest, Donation, Donor
from donorlink.services.eligibility import COOLDOWN_DAYS, next_eligible_date, utcnow
from donorlink.services.transactions import atomic, store_read
from donorlink.validators import REQUEST_REQUIRED_FIELDS, require_fields, validate_blood_type, validate_urgency

logger = logging.getLogger(__name__)


def _check_transition(blood_request, target):
    if target not in REQUEST_TRANSITIONS[blood_request.status]:
        raise ConflictError(f'Cannot mark a {blood_request.status} request as {target}')


def get_request(request_id):
    with store_read('Loading blood request'):
        blood_request = db.session.get(BloodRequest, request_id)
    if blood_request is None:
        raise NotFoundError('Blood request not found')
    return blood_request


def create_request(data, requester=None):
    data = dict(data)
    if requester is not None and not data.get('requester_name'):
        data['requester_name'] = requester.full_name or requester.email
    if requester is not None and not data.get('contact'):
        data['contact'] = requester.phone
    require_fields(data, REQUEST_REQUIRED_FIELDS)

    donor_id = data.get('donor_id')
    if donor_id is not None:
        with store_read('Loading donor'):
            if db.session.get(Donor, donor_id) is None:
                raise NotFoundError('Donor not found')

    blood_request = BloodRequest(
        requester_id=requester.id if requester is not None else None,
        requester_name=str(data['requester_name']).strip(),
        donor_id=donor_id,
        blood_type=validate_blood_type(data['blood_type']),
        city=str(data['city']).strip(),
        address=(data.get('address') or '').strip() or None,
        contact=str(data['contact']).strip(),
        reason=data.get('reason') or None,
        urgency_level=validate_urgency(data.get('urgency_level') or 'normal'),
        status='pending',
    )
    with atomic('Creating blood request') as session:
        session.add(blood_request)
    logger.info('Blood request %s created for %s (donor %s)', blood_request.id, blood_request.blood_type, donor_id)
    return blood_request


def _donor_acting_on(blood_request, actor_user_id):
    """Return the actor's donor profile if the request is addressed to it."""
    if blood_request.requester_id is not None and blood_request.requester_id == actor_user_id:
        raise PermissionDeniedError('You cannot respond to your own request')
    with store_read('Loading donor profile'):
        donor = Donor.query.filter_by(user_id=actor_user_id).first()
    if donor is None:
        raise PermissionDeniedError('Only donors can respond to blood requests')
    if blood_request.donor_id is not None and blood_request.donor_id != donor.id:
        raise PermissionDeniedError('This request is not addressed to you')
    return donor


def approve_request(request_id, actor_user_id, now=None, cooldown_days=COOLDOWN_DAYS):
    blood_request = get_request(request_id)
    donor = _donor_acting_on(blood_request, actor_user_id)
    _check_transition(blood_request, 'approved')

    now = now or utcnow()
    eligible_again = next_eligible_date(now, cooldown_days=cooldown_days)
    donation = Donation(
        donor_id=donor.id,
        request_id=blood_request.id,
        recipient_name=blood_request.requester_name,
        blood_type=blood_request.blood_type,
        city=blood_request.city,
        date=now,
        status='completed',
    )
    with atomic('Approving blood request') as session:
        blood_request.status = 'approved'
        blood_request.donor_id = donor.id  # Broadcast requests are claimed by the approving donor
        session.add(donation)
        donor.last_donation_date = now
        donor.next_eligible_date = eligible_again
    logger.info('Blood request %s approved by donor %s', blood_request.id, donor.id)
    return blood_request, donation, eligible_again


def reject_request(request_id, actor_user_id):
    blood_request = get_request(request_id)
    _donor_acting_on(blood_request, actor_user_id)
    if blood_request.donor_id is None:
        # Open requests stay open for the other donors
        raise PermissionDeniedError('Requests sent to all donors cannot be rejected')
    _check_transition(blood_request, 'rejected')

    with atomic('Rejecting blood request'):
        blood_request.status = 'rejected'
    logger.info('Blood request %s rejected', blood_request.id)
    return blood_request


def complete_request(request_id, actor):
    blood_request = get_request(request_id)
    allowed = actor.is_admin or blood_request.requester_id == actor.id
    if not allowed and blood_request.donor is not None:
        allowed = blood_request.donor.user_id == actor.id
    if not allowed:
        raise PermissionDeniedError('You cannot complete this request')
    _check_transition(blood_request, 'completed')

    with atomic('Completing blood request'):
        blood_request.status = 'completed'
    logger.info('Blood request %s completed', blood_request.id)
    return blood_request


def list_requests(status=None, urgency=None, donor_id=None, requester_id=None):
    query = BloodRequest.query
    if status:
        if status not in REQUEST_STATUSES:
            raise ValidationError(f"Invalid status. Allowed: {', '.join(REQUEST_STATUSES)}")
        query = query.filter_by(status=status)
    if urgency:
        if urgency not in URGENCY_LEVELS:
            raise ValidationError(f"Invalid urgency level. Allowed: {', '.join(URGENCY_LEVELS)}")
        query = query.filter_by(urgency_level=urgency)
    if donor_id is not None:
        query = query.filter_by(donor_id=donor_id)
    if requester_id is not None:
        query = query.filter_by(requester_id=requester_id)
    with store_read('Listing blood requests'):
        return query.order_by(BloodRequest.created_at.desc(), BloodRequest.id.desc()).all()


def list_requests_for_user(user):
    """Requests the user sent, and requests addressed to their donor profile"""
    sent = list_requests(requester_id=user.id)
    received = []
    if user.donor is not None:
        received = list_requests(donor_id=user.donor.id)
    return {'sent': sent, 'received': received}
