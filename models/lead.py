from datetime import datetime
from models import db, iso


class VisitorLead(db.Model):
    __tablename__ = 'visitor_leads'

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False, index=True)
    visitor_id = db.Column(db.Integer, db.ForeignKey('visitors.id', ondelete='CASCADE'), nullable=False, index=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    notes = db.Column(db.Text)
    follow_up_date = db.Column(db.Date)

    # Snapshot of the visitor when the lead was captured
    organization = db.Column(db.String(200))
    designation = db.Column(db.String(200))
    city = db.Column(db.String(120))
    country = db.Column(db.String(120))
    interests = db.Column(db.String(10))

    capture_date = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    visitor = db.relationship('Visitor', back_populates='leads')
    company = db.relationship('Company', backref=db.backref('leads', lazy=True))
    employee = db.relationship('User', backref=db.backref('leads', lazy=True))

    __table_args__ = (
        db.UniqueConstraint('visitor_id', 'company_id', 'capture_date', name='uq_lead_visitor_company_day'),
    )

    def to_dict(self, with_relations=False):
        data = {
            'id': self.id,
            'company_id': self.company_id,
            'visitor_id': self.visitor_id,
            'employee_id': self.employee_id,
            'notes': self.notes,
            'follow_up_date': iso(self.follow_up_date),
            'organization': self.organization,
            'designation': self.designation,
            'city': self.city,
            'country': self.country,
            'interests': self.interests,
            'created_at': iso(self.created_at),
            'updated_at': iso(self.updated_at),
        }
        if with_relations:
            visitor = self.visitor
            data.update({
                'visitor_phone': visitor.phone if visitor else None,
                'visitor_name': visitor.full_name if visitor else None,
                'visitor_email': visitor.email if visitor else None,
                'visitor_organization': visitor.organization if visitor else None,
                'visitor_designation': visitor.designation if visitor else None,
                'visitor_city': visitor.city if visitor else None,
                'visitor_country': visitor.country if visitor else None,
                'employee_name': self.employee.full_name if self.employee else None,
                'employee_email': self.employee.email if self.employee else None,
                'company_name': self.company.name if self.company else None,
            })
        return data
