import secrets
from datetime import datetime, timedelta, timezone

from shared.clients.session.SessionManagerInterface import SessionManagerInterface
from shared.clients.session.models.SessionState import PairingChallenge, SessionState
from shared.helper.HelperConfig import HelperConfig


class SessionManagerLocal(SessionManagerInterface):
    """In-process session registry for development and single-node deployments.

    Tracks the pairing lifecycle only; a transport connector marks a session
    connected through mark_connected() once the pairing completed.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._pairing_ttl = int(helper_config.get_number_val("SESSION_PAIRING_TTL", default=60))
        self._sessions: dict[str, SessionState] = {}

    async def do_initialize(self, user_id: str, bot_id: str) -> PairingChallenge:
        key = self.get_session_key(user_id, bot_id)
        current = self._sessions.get(key)
        if current and current.is_active:
            self.logging.info("Session %s already connected, no pairing needed.", key)
            return PairingChallenge()

        self._sessions[key] = SessionState(state="pairing", is_active=False)
        challenge = PairingChallenge(
            qr_code=f"{key}:{secrets.token_urlsafe(24)}",
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=self._pairing_ttl),
        )
        self.logging.info("Session %s waiting for pairing.", key)
        return challenge

    def mark_connected(self, user_id: str, bot_id: str) -> SessionState:
        key = self.get_session_key(user_id, bot_id)
        state = SessionState(state="connected", is_active=True, last_active=datetime.now(timezone.utc))
        self._sessions[key] = state
        self.logging.info("Session %s connected.", key, color="green")
        return state

    async def do_disconnect(self, user_id: str, bot_id: str) -> None:
        key = self.get_session_key(user_id, bot_id)
        previous = self._sessions.pop(key, None)
        if previous is not None:
            self.logging.info("Session %s disconnected (was %s).", key, previous.state)

    async def do_status(self, user_id: str, bot_id: str) -> SessionState:
        return self._sessions.get(self.get_session_key(user_id, bot_id), SessionState())
