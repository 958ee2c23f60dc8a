import logging

from geopy.distance import geodesic

from donorlink.constants import get_compatible_blood_types
from donorlink.errors import ValidationError
from donorlink.models import Donor
from donorlink.services.transactions import store_read
from donorlink.validators import validate_blood_type, validate_coordinates

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_KM = 50


def find_nearby_donors(latitude, longitude, radius_km=DEFAULT_RADIUS_KM, blood_types=None, compatible_with=None):
    """Return (donor, distance_km) pairs for eligible donors within radius_km, nearest first.

    ``compatible_with`` is a recipient blood type; when given, only donors
    whose type that recipient can receive are considered.
    """
    origin = validate_coordinates(latitude, longitude)
    try:
        radius_km = float(radius_km)
    except (TypeError, ValueError):
        raise ValidationError('Radius must be a number')
    if radius_km <= 0:
        raise ValidationError('Radius must be greater than zero')

    wanted = {validate_blood_type(bt) for bt in blood_types} if blood_types else None
    if compatible_with:
        compatible = set(get_compatible_blood_types(validate_blood_type(compatible_with)))
        wanted = compatible if wanted is None else wanted & compatible

    query = Donor.query.filter(
        Donor.is_eligible.is_(True),
        Donor.latitude.isnot(None),
        Donor.longitude.isnot(None),
    )
    if wanted is not None:
        query = query.filter(Donor.blood_type.in_(wanted))
    with store_read('Searching nearby donors'):
        candidates = query.all()

    nearby = []
    for donor in candidates:
        distance = geodesic(origin, (donor.latitude, donor.longitude)).km
        if distance <= radius_km:
            nearby.append((donor, round(distance, 2)))

    nearby.sort(key=lambda pair: pair[1])
    logger.debug('%d of %d donors within %.1f km', len(nearby), len(candidates), radius_km)
    return nearby
