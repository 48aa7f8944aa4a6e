import logging
from typing import Optional

import fitz  # pymupdf

from resume_enhancer.core.exceptions import DocumentExtractionError
from resume_enhancer.services.document_ai import DocumentAIClient

logger = logging.getLogger(__name__)

OCR_MIME_TYPES = {"application/pdf", "image/png", "image/jpeg"}
EXTENSION_MIME_TYPES = {
    "txt": "text/plain",
    "pdf": "application/pdf",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
}


class UnsupportedFileType(DocumentExtractionError):
    pass


def guess_mime_type(file_path: str, declared: Optional[str] = None) -> Optional[str]:
    """Use the declared type when there is one, otherwise go by extension."""
    if declared:
        return declared
    extension = file_path.rsplit(".", 1)[-1].lower() if "." in file_path else ""
    return EXTENSION_MIME_TYPES.get(extension)


def parse_pdf_text_layer(content: bytes) -> str:
    """Read the embedded text layer of a PDF."""
    text = ""
    with fitz.open(stream=content, filetype="pdf") as doc:
        for page in doc:
            text += page.get_text()
    return text


async def extract_resume_text(
    content: bytes,
    mime_type: Optional[str],
    document_ai: Optional[DocumentAIClient] = None,
) -> str:
    """
    Extract plain text from an uploaded resume.

    Plain text is decoded directly. PDFs and images go through Document AI;
    without a configured processor, PDFs fall back to their text layer.

    Raises:
        UnsupportedFileType: For anything other than txt, pdf, png or jpeg
        DocumentExtractionError: When extraction fails
    """
    if mime_type == "text/plain":
        return content.decode("utf-8", errors="replace").strip()

    if mime_type not in OCR_MIME_TYPES:
        raise UnsupportedFileType(
            f"File type ({mime_type or 'unknown'}) is not currently supported for direct processing. "
            "Please upload a plain text (.txt), PDF (.pdf), PNG (.png), or JPEG (.jpg, .jpeg) file."
        )

    if document_ai is not None:
        text = await document_ai.extract_text(content, mime_type)
        return text.strip()

    if mime_type == "application/pdf":
        logger.info("Document AI not configured, reading PDF text layer")
        try:
            return parse_pdf_text_layer(content).strip()
        except RuntimeError as e:
            raise DocumentExtractionError(f"Failed to read PDF: {e}") from e

    raise DocumentExtractionError("Missing Google Cloud configuration")
