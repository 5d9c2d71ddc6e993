"""
Services package for the form extraction preview.

Contains:
- extraction: OpenAI integration for form field extraction
- geometry: Letterboxing and normalized box mapping
- pdf_service: PDF page 1 rasterization
- preview: Preview derivation and payload encoding
- upload: Upload MIME validation
"""

from .extraction import ExtractionClient
from .pdf_service import PDFService

__all__ = ["ExtractionClient", "PDFService"]
