"""
File Upload Utility - validate PDFs submitted as base64 data URIs.

Transcripts, certificates and prospectuses arrive as
"data:application/pdf;base64,<payload>" strings and are stored as-is on
the owning record once validated here.

Max decoded size: Settings.max_upload_mb (25MB by default)
"""

import base64
import binascii
import io
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException
from PyPDF2 import PdfReader

from career_api.core.config import get_settings

PDF_DATA_URI_PREFIX = "data:application/pdf"

# Base64 inflates by 4/3; allow some room for the header
HEADER_SLACK_BYTES = 1024


@dataclass
class DecodedPdf:
    size: int
    pages: int


def encoded_limit(max_bytes: int) -> int:
    return (max_bytes * 4) // 3 + HEADER_SLACK_BYTES


def decode_pdf_data_uri(data_uri: str, max_bytes: Optional[int] = None) -> DecodedPdf:
    """
    Decode and validate a PDF data URI.

    Raises:
        HTTPException 400 for anything that is not a well-formed PDF data URI,
        413 when the file exceeds the size limit
    """
    if max_bytes is None:
        max_bytes = get_settings().max_upload_bytes
    max_mb = max_bytes / (1024 * 1024)

    if not isinstance(data_uri, str) or not data_uri.startswith(PDF_DATA_URI_PREFIX):
        raise HTTPException(status_code=400, detail="Invalid file format. Please upload a PDF file")

    # Reject before decoding
    if len(data_uri) > encoded_limit(max_bytes):
        raise HTTPException(status_code=413, detail=f"File too large. Maximum size: {max_mb:g}MB")

    header, sep, payload = data_uri.partition(",")
    if not sep or ";base64" not in header or not payload:
        raise HTTPException(status_code=400, detail="Invalid file data. Expected a base64 encoded PDF")

    try:
        content = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Invalid base64 file data")

    if len(content) > max_bytes:
        raise HTTPException(status_code=413, detail=f"File too large. Maximum size: {max_mb:g}MB")

    pages = count_pdf_pages(content)
    return DecodedPdf(size=len(content), pages=pages)


def count_pdf_pages(content: bytes) -> int:
    """Parse PDF bytes and return the page count."""
    try:
        reader = PdfReader(io.BytesIO(content))
        pages = len(reader.pages)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Could not read PDF: {str(e)}")

    if pages == 0:
        raise HTTPException(status_code=400, detail="PDF file has no pages")
    return pages
