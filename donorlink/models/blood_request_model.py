from donorlink.extensions import db
from donorlink.services.eligibility import utcnow


class BloodRequest(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    requester_id = db.Column(db.Integer, db.ForeignKey('user.id'))  # Null for anonymous requests
    requester_name = db.Column(db.String(100), nullable=False)
    donor_id = db.Column(db.Integer, db.ForeignKey('donor.id', ondelete='SET NULL'))  # Null for broadcast requests
    blood_type = db.Column(db.String(3), nullable=False, index=True)
    city = db.Column(db.String(100), nullable=False)
    address = db.Column(db.String(255))
    contact = db.Column(db.String(20), nullable=False)
    reason = db.Column(db.Text)
    urgency_level = db.Column(db.String(20), nullable=False, default='normal')
    status = db.Column(db.String(20), nullable=False, default='pending', index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    requester = db.relationship('User')
    donor = db.relationship('Donor', back_populates='requests')
    donation = db.relationship('Donation', back_populates='request', uselist=False)

    def to_dict(self):
        return {
            'id': self.id,
            'requester_id': self.requester_id,
            'requester_name': self.requester_name,
            'donor_id': self.donor_id,
            'blood_type': self.blood_type,
            'city': self.city,
            'address': self.address,
            'contact': self.contact,
            'reason': self.reason,
            'urgency_level': self.urgency_level,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<BloodRequest {self.id} {self.blood_type} {self.status}>'
