"""Report generation module"""

from benchaudit.report.reporter import ResultReporter, SUPPORTED_FORMATS, failed_checks

__all__ = ['ResultReporter', 'SUPPORTED_FORMATS', 'failed_checks']
