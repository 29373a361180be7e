from datetime import datetime, timezone

from memory_match import db


def _utcnow():
    return datetime.now(timezone.utc)


class StoredValue(db.Model):
    """JSON document stored under a string key (leaderboards live here)."""
    __tablename__ = 'stored_value'
    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(128), unique=True, nullable=False, index=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            'key': self.key,
            'value': self.value,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
