BLOOD_TYPES = ['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-']

URGENCY_LEVELS = ['normal', 'critical', 'needed_today']

REQUEST_STATUSES = ['pending', 'approved', 'rejected', 'completed']

DONATION_STATUSES = ['completed']

USER_ROLES = ['user', 'admin']

# Allowed request status changes; anything missing here is a conflict
REQUEST_TRANSITIONS = {
    'pending': {'approved', 'rejected'},
    'approved': {'completed'},
    'rejected': set(),
    'completed': set(),
}

# Recipient blood type -> donor blood types it can receive from
RECEIVE_COMPATIBILITY = {
    'O-': ['O-'],
    'O+': ['O-', 'O+'],
    'A-': ['O-', 'A-'],
    'A+': ['O-', 'O+', 'A-', 'A+'],
    'B-': ['O-', 'B-'],
    'B+': ['O-', 'O+', 'B-', 'B+'],
    'AB-': ['O-', 'A-', 'B-', 'AB-'],
    'AB+': ['O-', 'O+', 'A-', 'A+', 'B-', 'B+', 'AB-', 'AB+'],
}


def get_compatible_blood_types(blood_type):
    """Return list of donor blood types compatible with the given recipient type"""
    return RECEIVE_COMPATIBILITY.get(blood_type, [])
