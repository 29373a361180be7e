import logging
import random
import string
import time
from typing import Dict, Optional

from .board import generate_board
from .leaderboard import Leaderboard
from .levels import Level
from .scheduler import ManualScheduler, SocketIOScheduler
from .session import GameSession, GameState
from .storage import DatabaseStorage

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Live sessions of one app, keyed by a short session code.

    Bound to the app with ``init_app``; in TESTING mode sessions run on a
    ``ManualScheduler`` so tests advance time explicitly.
    """

    def __init__(self, app=None):
        self._sessions: Dict[str, GameSession] = {}
        self._touched: Dict[str, float] = {}
        self.scheduler = None
        self.idle_ttl = 1800
        self.completed_ttl = 300
        self.leaderboard: Optional[Leaderboard] = None
        self.code_length = 4
        self.socketio = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app, socketio=None, storage=None):
        self._sessions = {}
        self._touched = {}
        self.socketio = socketio
        self.code_length = int(app.config.get('SESSION_CODE_LENGTH', 4))
        self.idle_ttl = int(app.config.get('SESSION_IDLE_TTL_SEC', 1800))
        self.completed_ttl = int(app.config.get('SESSION_COMPLETED_TTL_SEC', 300))
        if app.config.get('TESTING'):
            self.scheduler = ManualScheduler(start=time.time())
        else:
            self.scheduler = SocketIOScheduler(socketio)
        self.leaderboard = Leaderboard(storage or DatabaseStorage(app))
        app.extensions['memory_match'] = self

    def _generate_code(self) -> str:
        while True:
            code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=self.code_length))
            if code not in self._sessions:
                return code

    def create(self, level: Level) -> GameSession:
        self.evict_idle()
        code = self._generate_code()
        session = GameSession(self.scheduler, leaderboard=self.leaderboard, name=code)
        if self.socketio is not None:
            session.subscribe(self._broadcaster(code))
        self._sessions[code] = session
        self._touched[code] = self.scheduler.clock()
        session.initialize(generate_board(level.pair_count), level)
        logger.info(f"[session-create] session={code} level={level.name}")
        return session

    def _broadcaster(self, code: str):
        def _emit(snapshot):
            payload = snapshot.to_dict()
            payload['session_code'] = code
            self.socketio.emit('state_update', payload, to=f"session:{code}", namespace='/ws')
        return _emit

    def get(self, code: str) -> Optional[GameSession]:
        code = (code or '').upper()
        session = self._sessions.get(code)
        if session is not None:
            self._touched[code] = self.scheduler.clock()
        return session

    def discard(self, code: str) -> bool:
        code = (code or '').upper()
        session = self._sessions.pop(code, None)
        self._touched.pop(code, None)
        if session is None:
            return False
        session.reset()
        logger.info(f"[session-discard] session={code}")
        return True

    def evict_idle(self) -> int:
        """Drop sessions idle past their TTL; completed ones use the shorter TTL."""
        now = self.scheduler.clock()
        stale = []
        for code, session in self._sessions.items():
            ttl = self.completed_ttl if session.state == GameState.COMPLETED else self.idle_ttl
            if now - self._touched.get(code, now) >= ttl:
                stale.append(code)
        for code in stale:
            self._sessions.pop(code).reset()
            self._touched.pop(code, None)
            logger.info(f"[session-evict] session={code}")
        return len(stale)

    def __len__(self):
        return len(self._sessions)
