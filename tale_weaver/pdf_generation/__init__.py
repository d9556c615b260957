"""
PDF export for finished storybooks.
"""

from .builder import StorybookPDFBuilder, default_pdf_filename

__all__ = ["StorybookPDFBuilder", "default_pdf_filename"]
