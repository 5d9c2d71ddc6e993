"""
Form Lens.

Extracts form elements (text fields, checkboxes, tables, signatures and
selection marks) from images and PDFs with an AI model and shows them
over a preview of the document.
"""

__version__ = "1.0.0"
