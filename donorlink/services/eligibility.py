# Donation cooldown arithmetic. Donor.is_eligible is an admin override and wins
# over the date-based figures, which are advisory.
from collections import namedtuple
from datetime import datetime, timedelta, timezone

from donorlink.errors import ValidationError

COOLDOWN_DAYS = 90

Eligibility = namedtuple('Eligibility', ['eligible', 'days_remaining', 'progress_percent'])


def utcnow():
    """Naive UTC timestamp, the form every datetime column is stored in"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _check_cooldown(cooldown_days):
    if cooldown_days <= 0:
        raise ValidationError('Cooldown period must be a positive number of days')


def days_since(last_donation_date, now):
    return (now - last_donation_date).days


def calculate_eligibility(last_donation_date, now=None, cooldown_days=COOLDOWN_DAYS):
    _check_cooldown(cooldown_days)
    if last_donation_date is None:
        return Eligibility(True, 0, 100.0)

    now = now or utcnow()
    elapsed = days_since(last_donation_date, now)
    days_remaining = max(0, cooldown_days - elapsed)
    progress = (cooldown_days - days_remaining) / cooldown_days * 100
    return Eligibility(
        eligible=elapsed >= cooldown_days,
        days_remaining=days_remaining,
        progress_percent=min(max(progress, 0.0), 100.0),
    )


def next_eligible_date(last_donation_date, now=None, cooldown_days=COOLDOWN_DAYS):
    _check_cooldown(cooldown_days)
    if last_donation_date is None:
        return now or utcnow()
    return last_donation_date + timedelta(days=cooldown_days)


def is_donor_eligible(donor):
    """Effective availability of a donor: the admin flag wins."""
    return bool(donor.is_eligible)


def eligibility_report(donor, now=None, cooldown_days=COOLDOWN_DAYS):
    result = calculate_eligibility(donor.last_donation_date, now=now, cooldown_days=cooldown_days)
    return {
        'donor_id': donor.id,
        'is_eligible': is_donor_eligible(donor),
        'cooldown_eligible': result.eligible,
        'days_remaining': result.days_remaining,
        'progress_percent': round(result.progress_percent, 2),
        'cooldown_days': cooldown_days,
        'last_donation_date': donor.last_donation_date.isoformat() if donor.last_donation_date else None,
        'next_eligible_date': donor.next_eligible_date.isoformat() if donor.next_eligible_date else None,
    }
