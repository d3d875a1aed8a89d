import asyncio
import os

import httpx

from shared.clients.blob.BlobClientInterface import BlobClientInterface
from shared.clients.blob.models.StoredBlob import StoredBlob
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class BlobClientLocal(BlobClientInterface):
    """Stores original uploads on the local filesystem below BLOB_LOCAL_ROOT_DIR."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._root_dir = os.path.abspath(self.get_config_val("ROOT_DIR", default="storage/uploads", val_type="string"))
        self._public_url = self.get_config_val("PUBLIC_URL", default="file://" + self._root_dir, val_type="string")
        self._booted = False

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def is_booted(self) -> bool:
        return self._booted

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Local"

    def get_public_url(self, key: str) -> str:
        return f"{self._public_url.rstrip('/')}/{key}"

    def _get_path(self, key: str) -> str:
        """Resolve a key to a path below the root dir.

        Raises:
            ValueError: If the key escapes the root dir.
        """
        path = os.path.abspath(os.path.join(self._root_dir, key))
        if os.path.commonpath([path, self._root_dir]) != self._root_dir:
            raise ValueError("Blob key '%s' resolves outside of the storage root." % key)
        return path

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="ROOT_DIR", val_type="string", default="storage/uploads"),
            EnvConfig(env_key="PUBLIC_URL", val_type="string", default="file://"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._public_url

    def _get_endpoint_healthcheck(self) -> str:
        return ""

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    async def boot(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Create the storage root. No HTTP client is needed for local disk."""
        await asyncio.to_thread(os.makedirs, self._root_dir, exist_ok=True)
        self._booted = True

    async def close(self) -> None:
        self._booted = False

    async def do_healthcheck(self) -> httpx.Response:
        """Report 200 when the storage root is a writable directory, 503 otherwise."""
        writable = os.path.isdir(self._root_dir) and os.access(self._root_dir, os.W_OK)
        return httpx.Response(200 if writable else 503)

    ##########################################
    ############### REQUESTS #################
    ##########################################

    def _write(self, path: str, data: bytes) -> None:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as buffer:
            buffer.write(data)

    def _remove(self, path: str) -> bool:
        try:
            os.remove(path)
            return True
        except FileNotFoundError:
            return False

    async def do_put(self, data: bytes, content_type: str, key_hint: str) -> StoredBlob:
        key = self.make_key(key_hint)
        path = self._get_path(key)
        await asyncio.to_thread(self._write, path, data)
        self.logging.debug("Stored blob '%s' (%d bytes, %s) on local disk.", key, len(data), content_type)
        return StoredBlob(url=self.get_public_url(key), key=key, size=len(data))

    async def do_delete(self, key: str) -> None:
        removed = await asyncio.to_thread(self._remove, self._get_path(key))
        if not removed:
            self.logging.debug("Blob '%s' did not exist on local disk, nothing to delete.", key)
