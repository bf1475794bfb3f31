"""Audit types that gather evidence for checks"""

from benchaudit.audit.base import Auditer
from benchaudit.audit.shell import ShellAudit
from benchaudit.audit.file_search import FileSearchAudit, parse_permission
from benchaudit.audit.text_search import TextSearchAudit
from benchaudit.audit.registry import (
    AuditTypeRegistry,
    AuditTypeError,
    DEFAULT_AUDIT_TYPE,
    FILE_SEARCH_AUDIT_TYPE,
    TEXT_SEARCH_AUDIT_TYPE,
)

__all__ = [
    'Auditer',
    'ShellAudit',
    'FileSearchAudit',
    'TextSearchAudit',
    'parse_permission',
    'AuditTypeRegistry',
    'AuditTypeError',
    'DEFAULT_AUDIT_TYPE',
    'FILE_SEARCH_AUDIT_TYPE',
    'TEXT_SEARCH_AUDIT_TYPE',
]
