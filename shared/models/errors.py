"""Error taxonomy shared by services and the API layer.

Every error carries a fixed, user-safe message and the HTTP status the API
answers with. Upstream detail (response bodies, prompts, vectors, stack
traces) is logged by the raising service and never put into the message.

Hierarchy:
  DocBotError
    ValidationError  - bad input, nothing was persisted
    UpstreamError    - an external collaborator failed
    DomainError      - a consistency rule was violated
"""


class DocBotError(Exception):
    """Base class of all errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "The request could not be processed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


##########################################
############## VALIDATION ################
##########################################

class ValidationError(DocBotError):
    status_code = 400
    default_message = "The request is invalid."


class MissingFile(ValidationError):
    default_message = "File is required."


class UnsupportedMediaType(ValidationError):
    status_code = 415
    default_message = "Unsupported file type. Please upload a .txt, .pdf, or .docx file."


class PayloadTooLarge(ValidationError):
    status_code = 413
    default_message = "The uploaded file is too large."


##########################################
############### UPSTREAM #################
##########################################

class UpstreamError(DocBotError):
    status_code = 502
    default_message = "An upstream service failed."


class ExtractionFailed(UpstreamError):
    status_code = 422
    default_message = "The text of the document could not be extracted."


class StorageWriteFailed(UpstreamError):
    default_message = "The document could not be stored."


class EmbeddingFailed(UpstreamError):
    default_message = "The document could not be indexed."


class PersistenceFailed(UpstreamError):
    status_code = 500
    default_message = "The document could not be saved."


class CompletionFailed(UpstreamError):
    default_message = "The answer could not be generated."


##########################################
################ DOMAIN ##################
##########################################

class DomainError(DocBotError):
    status_code = 409
    default_message = "The request conflicts with the current state."


class NotFound(DomainError):
    status_code = 404
    default_message = "Not found."


class QuotaExceeded(DomainError):
    default_message = "Maximum number of bots reached."

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(
            f"Maximum number of bots ({limit}) reached. "
            "Please delete an existing bot before creating a new one."
        )


class DuplicateAssociation(DomainError):
    default_message = "The document is already attached to this bot."
