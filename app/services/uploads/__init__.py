from .pdf_gate import PdfUploadGate, StoredFile

__all__ = ['PdfUploadGate', 'StoredFile']
