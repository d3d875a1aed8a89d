"""Pydantic models for documents and their embedding chunks.

Hierarchy:
  UploadPayload   - raw upload as received from the API, before indexing.
  Document        - an uploaded, text-extracted document.
  EmbeddingChunk  - one searchable unit of a document (text + vector).
  ScoredChunk     - an EmbeddingChunk ranked against a query.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

MEDIA_TYPE_TEXT = "text/plain"
MEDIA_TYPE_PDF = "application/pdf"
MEDIA_TYPE_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SUPPORTED_MEDIA_TYPES = (MEDIA_TYPE_TEXT, MEDIA_TYPE_PDF, MEDIA_TYPE_DOCX)


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class UploadPayload(BaseModel):
    """A file upload targeted at one bot."""

    data: bytes
    file_name: str
    media_type: str


class Document(BaseModel):
    """An uploaded document with its extracted text.

    The content is non-empty plain text whenever processing_status is completed.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    file_name: str
    media_type: str
    content: str
    file_url: str
    file_key: str
    file_size: int
    uploaded_at: datetime
    processing_status: ProcessingStatus = ProcessingStatus.COMPLETED


class DocumentSummary(BaseModel):
    """Document without its extracted text, used for listings."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    file_name: str
    media_type: str
    file_url: str
    file_size: int
    uploaded_at: datetime
    processing_status: ProcessingStatus


class EmbeddingChunk(BaseModel):
    """A chunk of document text paired with its embedding vector.

    owner and document ids are denormalised so retrieval can filter by
    tenant without a join.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    document_id: str
    chunk_index: int
    file_name: str
    content: str
    embedding: list[float]


class ScoredChunk(BaseModel):
    chunk: EmbeddingChunk
    similarity: float


# fallback when a client sends no or a generic content type
EXTENSION_MEDIA_TYPES = {
    ".txt": MEDIA_TYPE_TEXT,
    ".pdf": MEDIA_TYPE_PDF,
    ".docx": MEDIA_TYPE_DOCX,
}
