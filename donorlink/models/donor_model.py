from donorlink.extensions import db
from donorlink.services.eligibility import COOLDOWN_DAYS, utcnow, calculate_eligibility


def _iso(value):
    return value.isoformat() if value else None


class Donor(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), unique=True)  # Admin-created donors may have no account
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120))
    phone = db.Column(db.String(20), nullable=False)
    age = db.Column(db.Integer, nullable=False)
    weight = db.Column(db.Integer)  # kg
    blood_type = db.Column(db.String(3), nullable=False, index=True)
    city = db.Column(db.String(100), nullable=False)
    address = db.Column(db.String(255))
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)
    is_eligible = db.Column(db.Boolean, nullable=False, default=True)  # Admin override, see is_donor_eligible()
    last_donation_date = db.Column(db.DateTime)
    next_eligible_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship('User', back_populates='donor')
    donations = db.relationship('Donation', back_populates='donor', lazy=True, cascade='all, delete-orphan')
    requests = db.relationship('BloodRequest', back_populates='donor', lazy=True)

    def eligibility(self, now=None, cooldown_days=COOLDOWN_DAYS):
        return calculate_eligibility(self.last_donation_date, now=now, cooldown_days=cooldown_days)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'age': self.age,
            'weight': self.weight,
            'blood_type': self.blood_type,
            'city': self.city,
            'address': self.address,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'is_eligible': self.is_eligible,
            'last_donation_date': _iso(self.last_donation_date),
            'next_eligible_date': _iso(self.next_eligible_date),
            'created_at': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Donor {self.name}>'
