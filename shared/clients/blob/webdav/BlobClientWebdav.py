import posixpath

from shared.clients.blob.BlobClientInterface import BlobClientInterface
from shared.clients.blob.models.StoredBlob import StoredBlob
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class BlobClientWebdav(BlobClientInterface):
    """Stores original uploads on a WebDAV server (nginx dav, Nextcloud, rclone serve webdav, ...)."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._public_url = self.get_config_val("PUBLIC_URL", default=self._base_url, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Webdav"

    def get_public_url(self, key: str) -> str:
        return f"{self._public_url.rstrip('/')}/{key}"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"Authorization": f"Bearer {self._api_key}"}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return ""

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def _do_ensure_collections(self, key: str) -> None:
        """Create the parent collections of a key, WebDAV PUT does not create them.

        405 means the collection already exists.
        """
        directory = posixpath.dirname(key)
        if not directory:
            return
        path = ""
        for segment in directory.split("/"):
            path = f"{path}/{segment}" if path else segment
            response = await self.do_request(method="MKCOL", endpoint=path + "/")
            if response.status_code not in (201, 405):
                raise Exception(
                    "Could not create WebDAV collection '%s' (status %d)." % (path, response.status_code)
                )

    async def do_put(self, data: bytes, content_type: str, key_hint: str) -> StoredBlob:
        key = self.make_key(key_hint)
        await self._do_ensure_collections(key)
        await self.do_request(
            method="PUT",
            content=data,
            endpoint=key,
            additional_headers={"Content-Type": content_type},
            raise_on_error=True,
        )
        self.logging.debug("Stored blob '%s' (%d bytes) on WebDAV.", key, len(data))
        return StoredBlob(url=self.get_public_url(key), key=key, size=len(data))

    async def do_delete(self, key: str) -> None:
        response = await self.do_request(method="DELETE", endpoint=key)
        if response.status_code == 404:
            self.logging.debug("Blob '%s' did not exist on WebDAV, nothing to delete.", key)
            return
        if response.status_code >= 300:
            raise Exception("Deleting blob '%s' failed with status %d." % (key, response.status_code))
