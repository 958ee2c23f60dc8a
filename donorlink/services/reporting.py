# Dashboard aggregates; dates are bucketed by their UTC calendar date
from collections import Counter, OrderedDict
from collections.abc import Mapping
from datetime import date, datetime, timezone

from sqlalchemy.orm import joinedload

from donorlink.constants import BLOOD_TYPES
from donorlink.models import BloodRequest, Donation, Donor
from donorlink.services.eligibility import utcnow
from donorlink.services.transactions import store_read


def _get(obj, field):
    if isinstance(obj, Mapping):
        return obj.get(field)
    return getattr(obj, field, None)


def _as_date(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    if parsed.tzinfo:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def summarize_donations(donations, today=None, top_n=5):
    today = _as_date(today) or utcnow().date()
    monthly = yearly = 0
    by_group = Counter()
    donor_counts = Counter()
    donor_names = {}

    for donation in donations:
        donated_on = _as_date(_get(donation, 'date'))
        if donated_on and donated_on.year == today.year:
            yearly += 1
            if donated_on.month == today.month:
                monthly += 1

        blood_type = _get(donation, 'blood_type')
        if blood_type:
            by_group[blood_type] += 1

        donor = _get(donation, 'donor')
        email = _get(donor, 'email') if donor is not None else None
        if email:
            donor_counts[email] += 1
            donor_names.setdefault(email, _get(donor, 'name'))

    by_blood_group = OrderedDict((bg, by_group.get(bg, 0)) for bg in BLOOD_TYPES)
    for blood_type, count in by_group.items():
        by_blood_group.setdefault(blood_type, count)

    return {
        'monthly_count': monthly,
        'yearly_count': yearly,
        'by_blood_group': dict(by_blood_group),
        'top_donors': [
            {'name': donor_names[email], 'email': email, 'count': count}
            for email, count in donor_counts.most_common(top_n)
        ],
    }


def top_demand_groups(requests, top_n=5):
    demand = Counter(
        _get(r, 'blood_type') for r in requests
        if _get(r, 'status') == 'pending' and _get(r, 'blood_type')
    )
    return [{'blood_type': bt, 'count': count} for bt, count in demand.most_common(top_n)]


def dashboard_stats(today=None, top_n=5):
    with store_read('Loading dashboard data'):
        donations = (Donation.query.options(joinedload(Donation.donor))
                     .order_by(Donation.date.desc()).all())
        pending = BloodRequest.query.filter_by(status='pending').all()
        total_donors = Donor.query.count()
        eligible_donors = Donor.query.filter(Donor.is_eligible.is_(True)).count()

    stats = summarize_donations(donations, today=today, top_n=top_n)
    stats['top_demand_groups'] = top_demand_groups(pending, top_n=top_n)
    stats['total_donors'] = total_donors
    stats['eligible_donors'] = eligible_donors
    return stats
