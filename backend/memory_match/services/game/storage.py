import json
from typing import Any, Dict, Optional


class MemoryStorage:
    """Process-local key/value store.

    Values are kept as JSON text, the way browser local storage holds them,
    so a reader sees the same shapes (and the same corruption modes) as with
    the database store.
    """

    def __init__(self):
        self._data: Dict[str, str] = {}

    def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def save_raw(self, key: str, raw: str) -> None:
        self._data[key] = raw


class DatabaseStorage:
    """Key/value store on the ``stored_value`` table.

    Every call pushes its own app context so it can run from scheduler
    callbacks outside a request.
    """

    def __init__(self, app=None):
        self.app = app

    def load(self, key: str) -> Optional[Any]:
        from memory_match.models import StoredValue
        with self.app.app_context():
            row = StoredValue.query.filter_by(key=key).first()
            if row is None:
                return None
            return json.loads(row.value)

    def save(self, key: str, value: Any) -> None:
        from memory_match import db
        from memory_match.models import StoredValue
        with self.app.app_context():
            try:
                row = StoredValue.query.filter_by(key=key).first()
                if row is None:
                    row = StoredValue(key=key)
                row.value = json.dumps(value)
                db.session.add(row)
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
