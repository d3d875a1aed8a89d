from shared.clients.ClientManager import ClientManager
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface


class EmbedClientManager(ClientManager):
    """Picks the embedding backend from EMBED_ENGINE.

    Indexing and querying must share one client, otherwise stored and query
    vectors would not be comparable. The application creates one manager at startup.
    """

    client_type = "embed"
    class_prefix = "EmbedClient"

    def get_client(self) -> EmbedClientInterface:
        return self.client
