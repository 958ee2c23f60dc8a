from donorlink.extensions import db
from donorlink.services.eligibility import utcnow


class Donation(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    donor_id = db.Column(db.Integer, db.ForeignKey('donor.id', ondelete='CASCADE'), nullable=False, index=True)
    request_id = db.Column(db.Integer, db.ForeignKey('blood_request.id'), unique=True)  # At most one donation per request
    recipient_name = db.Column(db.String(100), nullable=False)
    blood_type = db.Column(db.String(3), nullable=False)
    city = db.Column(db.String(100), nullable=False)
    date = db.Column(db.DateTime, nullable=False, default=utcnow)
    status = db.Column(db.String(20), nullable=False, default='completed')
    idempotency_key = db.Column(db.String(64), unique=True)

    donor = db.relationship('Donor', back_populates='donations')
    request = db.relationship('BloodRequest', back_populates='donation')

    def to_dict(self):
        return {
            'id': self.id,
            'donor_id': self.donor_id,
            'request_id': self.request_id,
            'recipient_name': self.recipient_name,
            'blood_type': self.blood_type,
            'city': self.city,
            'date': self.date.isoformat() if self.date else None,
            'status': self.status,
        }
