import posixpath

from fastapi import APIRouter, Depends, File, Request, UploadFile, status

from server.dependencies.auth import verify_api_key
from server.models.requests import AttachDocumentsRequest
from server.models.responses import AttachResponse, DocumentListResponse, MessageResponse, UploadResponse
from shared.models.document import EXTENSION_MEDIA_TYPES, UploadPayload
from shared.models.errors import MissingFile

router = APIRouter(
    prefix="/users/{user_id}/bots/{bot_id}/documents",
    tags=["documents"],
    dependencies=[Depends(verify_api_key)],
)

_GENERIC_CONTENT_TYPES = ("", "application/octet-stream")


def _resolve_media_type(file: UploadFile) -> str:
    """Declared content type, or the one implied by the file extension when the client sent a generic type."""
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type in _GENERIC_CONTENT_TYPES:
        _, ext = posixpath.splitext((file.filename or "").lower())
        return EXTENSION_MEDIA_TYPES.get(ext, content_type or "application/octet-stream")
    return content_type


@router.get("")
async def list_bot_documents(request: Request, user_id: str, bot_id: str) -> DocumentListResponse:
    """List the documents attached to a bot."""
    documents = await request.app.state.bot_service.do_list_bot_documents(user_id, bot_id)
    return DocumentListResponse(documents=documents, total=len(documents))


@router.post("")
async def attach_documents(request: Request, user_id: str, bot_id: str, body: AttachDocumentsRequest) -> AttachResponse:
    """Attach already uploaded documents of the user to a bot."""
    attached = await request.app.state.bot_service.do_attach_documents(user_id, bot_id, body.document_ids)
    return AttachResponse(bot_id=bot_id, document_ids=attached)


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_document(
    request: Request,
    user_id: str,
    bot_id: str,
    file: UploadFile | None = File(default=None),
) -> UploadResponse:
    """Upload a .txt, .pdf or .docx file, index it and attach it to the bot.

    Args:
        request (Request): FastAPI request (provides app.state.indexing_service).
        user_id (str): Owning user.
        bot_id (str): Target bot.
        file (UploadFile | None): Multipart file field "file".

    Returns:
        UploadResponse: Id of the indexed document.
    """
    if file is None:
        raise MissingFile()

    indexing_service = request.app.state.indexing_service
    # one byte over the limit is enough to reject the upload
    data = await file.read(indexing_service.max_upload_bytes + 1)
    await file.close()

    file_name = posixpath.basename((file.filename or "upload").replace("\\", "/")) or "upload"
    upload = UploadPayload(data=data, file_name=file_name, media_type=_resolve_media_type(file))
    document_id = await indexing_service.do_index_document(user_id, bot_id, upload)
    return UploadResponse(document_id=document_id, file_name=file_name)


@router.delete("/{document_id}")
async def delete_document(request: Request, user_id: str, bot_id: str, document_id: str) -> MessageResponse:
    """Delete a document with its stored file, chunks and all of its associations."""
    await request.app.state.indexing_service.do_remove_document(user_id, bot_id, document_id)
    return MessageResponse(message="Document deleted successfully")


@router.delete("/{document_id}/association")
async def detach_document(request: Request, user_id: str, bot_id: str, document_id: str) -> MessageResponse:
    """Detach a document from the bot, the document itself is kept."""
    await request.app.state.bot_service.do_detach_document(user_id, bot_id, document_id)
    return MessageResponse(message="Document detached successfully")
