"""StoredBlob model: reference to an uploaded original file in blob storage."""

from pydantic import BaseModel


class StoredBlob(BaseModel):
    """Location of a stored original file.

    Attributes:
        url:  Public or internal URL of the object, stored on the document for display.
        key:  Storage key, the handle used for deletion.
        size: Number of bytes written.
    """

    url: str
    key: str
    size: int
