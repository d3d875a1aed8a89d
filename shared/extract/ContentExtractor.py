"""Plain text extraction for the supported upload media types."""

import asyncio
import io

from docx import Document as DocxDocument
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from shared.helper.HelperConfig import HelperConfig
from shared.models.document import MEDIA_TYPE_DOCX, MEDIA_TYPE_PDF, MEDIA_TYPE_TEXT, SUPPORTED_MEDIA_TYPES
from shared.models.errors import ExtractionFailed, UnsupportedMediaType


class ContentExtractor:
    """Turns raw upload bytes into plain text according to the declared media type.

    Parsing is CPU bound and runs in a worker thread, bounded by EXTRACT_TIMEOUT.
    """

    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()
        self.timeout = float(helper_config.get_number_val("EXTRACT_TIMEOUT", default=30))

    ##########################################
    ################ PARSERS #################
    ##########################################

    @staticmethod
    def _extract_text(data: bytes) -> str:
        return data.decode("utf-8-sig", errors="replace")

    @staticmethod
    def _extract_pdf(data: bytes) -> str:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
        return "\n".join(pages)

    @staticmethod
    def _extract_docx(data: bytes) -> str:
        document = DocxDocument(io.BytesIO(data))
        parts = [paragraph.text for paragraph in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                parts.append("\t".join(cell.text for cell in row.cells))
        return "\n".join(parts)

    def _get_parser(self, media_type: str):
        return {
            MEDIA_TYPE_TEXT: self._extract_text,
            MEDIA_TYPE_PDF: self._extract_pdf,
            MEDIA_TYPE_DOCX: self._extract_docx,
        }[media_type]

    ##########################################
    ################# CORE ###################
    ##########################################

    async def do_extract(self, data: bytes, media_type: str) -> str:
        """Extract plain text from raw bytes.

        Args:
            data (bytes): The uploaded file content.
            media_type (str): Declared media type of the upload.

        Returns:
            str: The extracted text, never empty.

        Raises:
            UnsupportedMediaType: If media_type is not one of the supported types.
            ExtractionFailed: If parsing fails, times out, or yields no text.
        """
        if media_type not in SUPPORTED_MEDIA_TYPES:
            raise UnsupportedMediaType()

        parser = self._get_parser(media_type)
        try:
            text = await asyncio.wait_for(asyncio.to_thread(parser, data), timeout=self.timeout)
        except asyncio.TimeoutError:
            self.logging.error("Text extraction (%s) timed out after %.0fs.", media_type, self.timeout)
            raise ExtractionFailed()
        except (PdfReadError, ValueError, KeyError, OSError) as exc:
            self.logging.error("Text extraction (%s) failed: %s", media_type, exc)
            raise ExtractionFailed()
        except Exception as exc:
            # zip / xml errors from corrupt docx files surface as assorted types
            self.logging.error("Text extraction (%s) failed with %s: %s", media_type, type(exc).__name__, exc)
            raise ExtractionFailed()

        if not text or not text.strip():
            self.logging.warning("Text extraction (%s) produced no text.", media_type)
            raise ExtractionFailed("The document does not contain any readable text.")
        return text.strip()
