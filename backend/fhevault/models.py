from datetime import datetime, timezone
import uuid

from fhevault import db


def _utcnow():
    return datetime.now(timezone.utc)


class Strategy(db.Model):
    __tablename__ = 'strategy'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Plain parameters are kept for the demo only
    risk_level = db.Column(db.Integer, nullable=False)
    allocation = db.Column(db.Integer, nullable=False)
    timeframe = db.Column(db.Integer, nullable=False)
    encrypted_data = db.Column(db.Text, nullable=False)
    encrypted_hash = db.Column(db.Text, nullable=False)
    encrypted_score = db.Column(db.Text, nullable=True)
    decrypted_score = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(20), nullable=False, default='pending')  # pending, computing, completed, failed
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    computed_at = db.Column(db.DateTime(timezone=True), nullable=True)
