"""表单构建."""

from .definitions import FieldDeclaration, FormSection, FormSubmissionResult, FormTab
from .form_builder import DEFAULT_FORM_CONFIG, FORM_ERROR_KEY, FormBuilder

__all__ = [
    "DEFAULT_FORM_CONFIG",
    "FORM_ERROR_KEY",
    "FieldDeclaration",
    "FormBuilder",
    "FormSection",
    "FormSubmissionResult",
    "FormTab",
]
