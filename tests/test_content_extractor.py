import io

import docx
import pytest
from PyPDF2 import PdfWriter

from shared.extract.ContentExtractor import ContentExtractor
from shared.models.document import MEDIA_TYPE_DOCX, MEDIA_TYPE_PDF, MEDIA_TYPE_TEXT
from shared.models.errors import ExtractionFailed, UnsupportedMediaType


@pytest.fixture
def extractor(helper_config) -> ContentExtractor:
    return ContentExtractor(helper_config=helper_config)


async def test_plain_text(extractor):
    text = await extractor.do_extract("Refunds within 30 days.\n".encode("utf-8"), MEDIA_TYPE_TEXT)
    assert text == "Refunds within 30 days."


async def test_docx_paragraphs(extractor):
    document = docx.Document()
    document.add_paragraph("Shipping takes 3 days.")
    document.add_paragraph("Refunds within 30 days.")
    buffer = io.BytesIO()
    document.save(buffer)

    text = await extractor.do_extract(buffer.getvalue(), MEDIA_TYPE_DOCX)

    assert "Shipping takes 3 days." in text
    assert "Refunds within 30 days." in text


async def test_pdf_without_text_fails(extractor):
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    buffer = io.BytesIO()
    writer.write(buffer)

    with pytest.raises(ExtractionFailed):
        await extractor.do_extract(buffer.getvalue(), MEDIA_TYPE_PDF)


async def test_corrupt_pdf_fails(extractor):
    with pytest.raises(ExtractionFailed):
        await extractor.do_extract(b"definitely not a pdf", MEDIA_TYPE_PDF)


async def test_whitespace_text_fails(extractor):
    with pytest.raises(ExtractionFailed):
        await extractor.do_extract(b"  \n\t ", MEDIA_TYPE_TEXT)


async def test_unsupported_media_type(extractor):
    with pytest.raises(UnsupportedMediaType):
        await extractor.do_extract(b"<html></html>", "text/html")
