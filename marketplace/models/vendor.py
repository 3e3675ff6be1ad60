# marketplace/models/vendor.py
from marketplace.extensions import db
from marketplace.core.database import BaseModel


class Vendor(BaseModel):
    __tablename__ = "vendors"

    name = db.Column(db.String(200), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True)
    phone = db.Column(db.String(50))
    address = db.Column(db.Text)
    country = db.Column(db.String(100), index=True)
    description = db.Column(db.Text)
    contact_person = db.Column(db.String(200))
    tax_id = db.Column(db.String(100))
    website = db.Column(db.String(255))
    notes = db.Column(db.Text)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<Vendor {self.name}>"

    def toggle_status(self):
        self.is_active = not self.is_active
        return self.is_active

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "country": self.country,
            "description": self.description,
            "contact_person": self.contact_person,
            "tax_id": self.tax_id,
            "website": self.website,
            "notes": self.notes,
            "is_active": self.is_active,
            "created_at": self.isoformat(self.created_at),
            "updated_at": self.isoformat(self.updated_at),
        }

    @staticmethod
    def find_by_name(name):
        return Vendor.query.filter_by(name=name).first()

    @staticmethod
    def find_by_email(email):
        return Vendor.query.filter_by(email=email).first()
