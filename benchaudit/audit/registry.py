"""Audit type registry"""

import logging
from typing import Any, Callable, Dict, List

from benchaudit.security import SecurityError
from benchaudit.audit.base import Auditer
from benchaudit.audit.shell import ShellAudit
from benchaudit.audit.file_search import FileSearchAudit
from benchaudit.audit.text_search import TextSearchAudit

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_TYPE = 'audit'
FILE_SEARCH_AUDIT_TYPE = 'file_search'
TEXT_SEARCH_AUDIT_TYPE = 'text_search'

AuditFactory = Callable[[Any], Auditer]


class AuditTypeError(Exception):
    """Exception raised for unknown or invalid audit types"""
    pass


class AuditTypeRegistry:
    """
    Maps audit type keys to factories that build Auditer objects.

    The registry is owned by whoever loads definitions; there is no module
    level instance.
    """

    def __init__(self):
        self._factories: Dict[str, AuditFactory] = {}

    @classmethod
    def with_defaults(cls, timeout: float = 60, boundary_path: str = '/') -> 'AuditTypeRegistry':
        """
        Create a registry holding the built-in audit types

        Args:
            timeout: Timeout in seconds for shell audits
            boundary_path: Workspace boundary for file and text searches
        """
        registry = cls()
        registry.register(DEFAULT_AUDIT_TYPE, lambda payload: _shell_audit(payload, timeout))
        registry.register(FILE_SEARCH_AUDIT_TYPE,
                          lambda payload: FileSearchAudit.from_payload(payload, boundary_path))
        registry.register(TEXT_SEARCH_AUDIT_TYPE,
                          lambda payload: TextSearchAudit.from_payload(payload, boundary_path))
        return registry

    def register(self, audit_type: str, factory: AuditFactory) -> None:
        """
        Register a factory for an audit type

        Raises:
            AuditTypeError: If the type is already registered or the factory is not callable
        """
        if not audit_type:
            raise AuditTypeError("audit type name cannot be empty")
        if not callable(factory):
            raise AuditTypeError(f"factory for audit type {audit_type} is not callable")
        if audit_type in self._factories:
            raise AuditTypeError(f"audit type {audit_type} already registered")

        self._factories[audit_type] = factory
        logger.debug(f"Registered audit type: {audit_type}")

    def create(self, audit_type: str, payload: Any) -> Auditer:
        """
        Build the Auditer for a payload

        Args:
            audit_type: Registry key; empty selects the shell audit
            payload: Raw audit value from the definition

        Raises:
            AuditTypeError: If the type is not registered or the payload is rejected
        """
        audit_type = audit_type or DEFAULT_AUDIT_TYPE
        factory = self._factories.get(audit_type)
        if factory is None:
            raise AuditTypeError(f"audit type {audit_type} is not registered")

        try:
            return factory(payload)
        except (TypeError, ValueError, SecurityError) as e:
            raise AuditTypeError(f"invalid payload for audit type {audit_type}: {e}") from e

    @property
    def types(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, audit_type: str) -> bool:
        return audit_type in self._factories


def _shell_audit(payload: Any, timeout: float) -> ShellAudit:
    if payload is None:
        payload = ''
    if isinstance(payload, (dict, list)):
        raise TypeError(f"shell audit expects a command string, got {type(payload).__name__}")
    return ShellAudit(str(payload), timeout=timeout)
