"""Base audit architecture"""

from abc import ABC, abstractmethod

from benchaudit.models import AuditResult


class Auditer(ABC):
    """Abstract base class for audits that gather evidence for a check"""

    @abstractmethod
    def execute(self, *custom_configs) -> AuditResult:
        """
        Run the audit

        Args:
            custom_configs: Extra objects handed to every audit of a run

        Returns:
            AuditResult with the captured output, an error message, and a
            state when the audit decides the outcome on its own
        """
        pass

    def describe(self) -> str:
        """Return a short text describing the audit, used in reports"""
        return ''
