from . import db, iso
from datetime import datetime


class Company(db.Model):
    __tablename__ = 'companies'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    company_code = db.Column(db.String(20), unique=True, nullable=False)
    contact_email = db.Column(db.String(120))
    contact_phone = db.Column(db.String(50))
    status = db.Column(db.String(20), nullable=False, default="active")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    users = db.relationship('User', back_populates='company', lazy=True)

    @property
    def is_active(self):
        return self.status == "active"

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'company_code': self.company_code,
            'contact_email': self.contact_email,
            'contact_phone': self.contact_phone,
            'status': self.status,
            'created_at': iso(self.created_at),
            'updated_at': iso(self.updated_at),
        }
