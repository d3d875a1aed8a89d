from abc import ABC, abstractmethod

from shared.clients.session.models.SessionState import PairingChallenge, SessionState
from shared.helper.HelperConfig import HelperConfig


class SessionManagerInterface(ABC):
    """Boundary to the messaging transport that keeps one live chat session per bot.

    Sessions are keyed by (user_id, bot_id). Services never hold session
    state themselves, they only go through this interface.
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config

    @staticmethod
    def get_session_key(user_id: str, bot_id: str) -> str:
        return f"{user_id}-{bot_id}"

    async def boot(self) -> None:
        """Acquire resources. Nothing to do by default."""
        return None

    async def close(self) -> None:
        """Release resources. Nothing to do by default."""
        return None

    @abstractmethod
    async def do_initialize(self, user_id: str, bot_id: str) -> PairingChallenge:
        """Start (or resume) the session of a bot and return the pairing challenge."""
        pass

    @abstractmethod
    async def do_disconnect(self, user_id: str, bot_id: str) -> None:
        """Force the session of a bot into the disconnected state. Idempotent."""
        pass

    @abstractmethod
    async def do_status(self, user_id: str, bot_id: str) -> SessionState:
        """Return the current session state of a bot."""
        pass
