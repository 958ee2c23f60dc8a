"""In-memory filtering and sorting of donor lists.

Donors may be model instances or plain dicts (e.g. ``to_dict()`` rows with an
added ``donation_count``).
"""
from collections.abc import Mapping

from donorlink.errors import ValidationError

SEARCH_FIELDS = ('name', 'email', 'phone')
SORT_DIRECTIONS = ('asc', 'desc')


def _value(donor, field):
    if isinstance(donor, Mapping):
        return donor.get(field)
    return getattr(donor, field, None)


def _contains(donor, field, needle):
    value = _value(donor, field)
    if value is None:
        return False
    return needle.lower() in str(value).lower()


def build_predicates(search=None, location=None, blood_group='all'):
    predicates = []

    if search and search.get('field') and search.get('value'):
        field = search['field']
        if field not in SEARCH_FIELDS:
            raise ValidationError(f"Search field must be one of: {', '.join(SEARCH_FIELDS)}")
        predicates.append(lambda d, f=field, v=search['value']: _contains(d, f, v))

    location = location or {}
    for field in ('city', 'address'):
        needle = location.get(field)
        if needle:
            predicates.append(lambda d, f=field, v=needle: _contains(d, f, v))

    if blood_group and blood_group != 'all':
        predicates.append(lambda d: _value(d, 'blood_type') == blood_group)

    return predicates


def filter_donors(donors, search=None, location=None, blood_group='all'):
    """Keep the donors matching every supplied predicate, in input order."""
    predicates = build_predicates(search, location, blood_group)
    return [donor for donor in donors if all(p(donor) for p in predicates)]


def sort_donors(donors, field, direction='asc'):
    """Stable sort on ``field``; donors without a value always come last."""
    if direction not in SORT_DIRECTIONS:
        raise ValidationError("Sort direction must be 'asc' or 'desc'")
    present = [d for d in donors if _value(d, field) is not None]
    missing = [d for d in donors if _value(d, field) is None]
    try:
        present = sorted(present, key=lambda d: _value(d, field), reverse=direction == 'desc')
    except TypeError:
        raise ValidationError(f'Cannot sort donors by {field}')
    return present + missing


def toggle_sort(current_field, current_direction, field):
    # Clicking the active column flips it, a new column starts ascending
    if field == current_field:
        return field, 'desc' if current_direction == 'asc' else 'asc'
    return field, 'asc'
