"""Domain models for the contact import service.

Configuration, contact, report and upload models used throughout the package.
"""

from .config_models import DatabaseConfig, HeaderRule, HeaderRuleSet, ImportConfig
from .contact import CandidateContact, Contact, ContactPage
from .error_record import ErrorRecord
from .import_report import ImportReport, RowError
from .uploaded_file import UploadedFile

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "HeaderRule",
    "HeaderRuleSet",
    "ImportConfig",
    # Contact models
    "CandidateContact",
    "Contact",
    "ContactPage",
    # Reporting models
    "ErrorRecord",
    "ImportReport",
    "RowError",
    "UploadedFile",
]
