"""Editor package containing the document model, live markers and the host widget."""

from . import document_model, editor_widget, markers

__all__ = ["document_model", "editor_widget", "markers"]
