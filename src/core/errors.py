"""Errors raised by the Core.

The CLI catches `EksupError` and turns it into a red message plus exit code 2;
everything else propagates as a regular traceback.
"""

from __future__ import annotations


class EksupError(Exception):
    """Base class for expected, user-facing failures."""


class VersionError(EksupError, ValueError):
    """A Kubernetes version string could not be parsed."""


class ReleaseDataError(EksupError):
    """Release data is missing, unreadable or has no entry for a version."""


class ChecklistReadError(EksupError):
    """A checklist file could not be read as UTF-8 text."""


class PlaybookError(EksupError):
    """The playbook could not be rendered or written."""


class ExportError(EksupError):
    """A report could not be written."""


class PdfBackendError(ExportError):
    """WeasyPrint or its system libraries (Pango) could not be loaded."""
