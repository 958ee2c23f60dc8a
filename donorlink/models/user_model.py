from donorlink.extensions import db, bcrypt
from donorlink.services.eligibility import utcnow


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), nullable=False, unique=True)
    password_hash = db.Column(db.String(128), nullable=False)
    full_name = db.Column(db.String(100))
    phone = db.Column(db.String(20))
    role = db.Column(db.String(10), nullable=False, default='user')
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    donor = db.relationship('Donor', back_populates='user', uselist=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == 'admin'

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'full_name': self.full_name,
            'phone': self.phone,
            'role': self.role,
            'donor_id': self.donor.id if self.donor else None,
        }

    def __repr__(self):
        return f'<User {self.email}>'
