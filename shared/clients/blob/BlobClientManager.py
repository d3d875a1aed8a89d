from shared.clients.ClientManager import ClientManager
from shared.clients.blob.BlobClientInterface import BlobClientInterface


class BlobClientManager(ClientManager):
    """Picks the storage backend for uploaded originals from BLOB_ENGINE, local disk by default."""

    client_type = "blob"
    class_prefix = "BlobClient"
    default_engine = "local"

    def get_client(self) -> BlobClientInterface:
        return self.client
