from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class EmbedClientOllama(EmbedClientInterface):
    """Embeddings from a local or remote Ollama server via /api/embed.

    Optional settings:
        EMBED_OLLAMA_API_KEY     Bearer token for Ollama behind a reverse proxy.
        EMBED_OLLAMA_KEEP_ALIVE  How long the model stays loaded, e.g. "10m".
        EMBED_OLLAMA_TRUNCATE    False makes over-long chunks an error instead of
                                 silently cut to the model's context window.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string").rstrip("/")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._keep_alive = self.get_config_val("KEEP_ALIVE", default="", val_type="string")
        self._truncate = self.get_config_val("TRUNCATE", default=True, val_type="bool")

    ##########################################
    ################ GETTER ##################
    ##########################################

    def _get_engine_name(self) -> str:
        return "Ollama"

    def _get_required_config(self) -> list[EnvConfig]:
        return [EnvConfig(env_key="BASE_URL", val_type="string", default=None)]

    def _get_auth_header(self) -> dict:
        return {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}

    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/api/version"

    def get_endpoint_embedding(self) -> str:
        return "/api/embed"

    def get_embed_payload(self, texts: list[str]) -> dict:
        # defaults are left to the server, only deviations are sent
        payload: dict = {"model": self.embed_model, "input": texts}
        if self._keep_alive:
            payload["keep_alive"] = self._keep_alive
        if not self._truncate:
            payload["truncate"] = False
        return payload

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        if "error" in response_data:
            raise ValueError("Ollama rejected the embedding request: %s" % response_data["error"])
        embeddings = response_data.get("embeddings") or []
        if not embeddings or any(not vector for vector in embeddings):
            raise ValueError("Ollama returned no usable embeddings for model '%s'." % self.embed_model)
        return embeddings
