from donorlink.models.user_model import User
from donorlink.models.donor_model import Donor
from donorlink.models.blood_request_model import BloodRequest
from donorlink.models.donation_model import Donation

__all__ = ['User', 'Donor', 'BloodRequest', 'Donation']
