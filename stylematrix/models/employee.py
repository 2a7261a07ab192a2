from ..extensions import db

class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, index=True)
    phone = db.Column(db.String(32), nullable=False, default="")
    is_active = db.Column(db.Boolean, nullable=False, default=True)  # soft flag, never hard-deleted
    created_at = db.Column(db.DateTime, default=db.func.now())
