import importlib

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class ClientManager:
    """Resolves the engine configured in <CLIENT_TYPE>_ENGINE to its client class.

    Engines live in shared.clients.<client_type>.<engine>.<Prefix><Engine>,
    e.g. shared.clients.embed.openai.EmbedClientOpenai. Subclasses name the
    client type, the class prefix and, if the setting is optional, a default.
    """

    client_type: str = ""
    class_prefix: str = ""
    default_engine: str | None = None

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        env_key = f"{self.client_type.upper()}_ENGINE"
        engine = self.helper_config.get_string_val(env_key, default=self.default_engine or "")
        if not engine.strip():
            raise ValueError(f"No {self.class_prefix} engine configured ({env_key}).")
        return engine.strip().lower()

    def _initialize_client(self) -> ClientInterface:
        """Import and instantiate the client of the configured engine.

        Raises:
            ValueError: If the engine is unset, unknown or its module cannot be imported.
        """
        engine = self._get_engine_from_env()
        class_name = f"{self.class_prefix}{engine.capitalize()}"
        module_path = f"shared.clients.{self.client_type}.{engine}.{class_name}"
        try:
            client_class = getattr(importlib.import_module(module_path), class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported {self.client_type} engine '{engine}': {e}")
        self.logging.debug("Using %s engine '%s'.", self.client_type, engine)
        return client_class(helper_config=self.helper_config)

    def get_client(self) -> ClientInterface:
        return self.client
