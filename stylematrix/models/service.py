from ..extensions import db

CATEGORIES = ("service", "product")

class Service(db.Model):
    __tablename__ = "services"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(180), nullable=False, index=True)
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    category = db.Column(db.String(16), nullable=False, default="service")  # service|product
    created_at = db.Column(db.DateTime, default=db.func.now())
