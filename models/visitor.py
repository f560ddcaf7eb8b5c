from datetime import datetime
from models import db, iso


class Visitor(db.Model):
    """A person met at an event. Shared by every company, keyed by phone."""
    __tablename__ = 'visitors'

    id = db.Column(db.Integer, primary_key=True)
    phone = db.Column(db.String(50), unique=True, nullable=False)
    full_name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(120))
    organization = db.Column(db.String(200))
    designation = db.Column(db.String(200))
    city = db.Column(db.String(120))
    country = db.Column(db.String(120))
    interests = db.Column(db.String(10))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    leads = db.relationship('VisitorLead', back_populates='visitor', lazy=True, cascade="all, delete-orphan")

    def summary(self):
        return {'id': self.id, 'phone': self.phone, 'full_name': self.full_name}

    def to_dict(self):
        return {
            'id': self.id,
            'phone': self.phone,
            'full_name': self.full_name,
            'email': self.email,
            'organization': self.organization,
            'designation': self.designation,
            'city': self.city,
            'country': self.country,
            'interests': self.interests,
            'created_at': iso(self.created_at),
            'updated_at': iso(self.updated_at),
        }
