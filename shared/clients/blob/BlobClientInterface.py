from abc import abstractmethod
import posixpath
import uuid

from shared.clients.ClientInterface import ClientInterface
from shared.clients.blob.models.StoredBlob import StoredBlob
from shared.helper.HelperConfig import HelperConfig


class BlobClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "blob"
        """
        return "blob"

    @abstractmethod
    def get_public_url(self, key: str) -> str:
        """
        Returns the URL under which the object with the given key is reachable.

        Args:
            key (str): The storage key.

        Returns:
            str: The object URL.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    def make_key(self, key_hint: str) -> str:
        """Build a collision-free storage key from a hint.

        The directory part and the file extension of the hint are kept, the
        file name is replaced by a random UUID so re-uploads never overwrite.

        Args:
            key_hint (str): E.g. "uploads/<user_id>/refunds.pdf".

        Returns:
            str: E.g. "uploads/<user_id>/3f2b...e1.pdf".
        """
        directory, file_name = posixpath.split(key_hint.strip().lstrip("/"))
        _, ext = posixpath.splitext(file_name)
        name = f"{uuid.uuid4().hex}{ext.lower()}"
        return posixpath.join(directory, name) if directory else name

    ##########################################
    ############### REQUESTS #################
    ##########################################

    @abstractmethod
    async def do_put(self, data: bytes, content_type: str, key_hint: str) -> StoredBlob:
        """Store raw bytes under a new key.

        Args:
            data (bytes): The original file content.
            content_type (str): Declared media type.
            key_hint (str): Directory and file name used to derive the key.

        Returns:
            StoredBlob: URL and key of the stored object.

        Raises:
            Exception: If the object could not be written.
        """
        pass

    @abstractmethod
    async def do_delete(self, key: str) -> None:
        """Delete the object with the given key.

        Idempotent: deleting a key that does not exist is not an error.

        Args:
            key (str): The storage key returned by do_put().

        Raises:
            Exception: If the backend refuses the deletion.
        """
        pass
