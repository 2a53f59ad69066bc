from sentquote import db
from datetime import datetime
import uuid


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    business_name = db.Column(db.String(255), default='')
    stripe_account_id = db.Column(db.String(255))
    stripe_connected = db.Column(db.Boolean, default=False, nullable=False)
    plan = db.Column(db.String(20), default='free', nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    quotes = db.relationship('Quote', backref='owner', lazy=True, cascade='all, delete-orphan')
