"""Failure reporting: attachments and scenario diagnostics."""

from booker.reporting.artifacts import Attachment, ArtifactAttachmentSink, AttachmentSink
from booker.reporting.diagnostics import DiagnosticEvent, DiagnosticsCollector

__all__ = [
    "Attachment",
    "ArtifactAttachmentSink",
    "AttachmentSink",
    "DiagnosticEvent",
    "DiagnosticsCollector",
]
