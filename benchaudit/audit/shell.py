"""Shell command audit"""

import logging
import subprocess

from benchaudit.models import AuditResult, State
from benchaudit.audit.base import Auditer

logger = logging.getLogger(__name__)

# POSIX shells exit with this status when a command cannot be found
COMMAND_NOT_FOUND = 127


class ShellAudit(Auditer):
    """Runs the audit text with ``sh -c`` and captures its standard output"""

    def __init__(self, command: str, timeout: float = 60, shell: str = 'sh'):
        """
        Args:
            command: Shell command line, pipes allowed
            timeout: Seconds to wait before the command is abandoned
            shell: Shell used to interpret the command
        """
        self.command = command or ''
        self.timeout = timeout
        self.shell = shell

    def describe(self) -> str:
        return self.command

    def execute(self, *custom_configs) -> AuditResult:
        if not self.command.strip():
            # Likely a warning message
            return AuditResult(state=State.WARN)

        logger.debug(f"Running audit command: {self.command}")
        try:
            completed = subprocess.run(
                [self.shell, '-c', self.command],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
                text=True,
            )
        except subprocess.TimeoutExpired:
            message = f"audit command timed out after {self.timeout}s: {self.command}"
            logger.warning(message)
            return AuditResult(error_message=message, state=State.WARN)
        except OSError as e:
            message = f"{self.shell}: unable to run audit command: {e}"
            logger.warning(message)
            return AuditResult(error_message=message, state=State.WARN)

        result = AuditResult(output=completed.stdout or '')
        if completed.returncode != 0:
            result.error_message = (
                f"exit status {completed.returncode}: {(completed.stderr or '').strip()}"
            ).rstrip(': ')
            logger.info(result.error_message)

        if completed.returncode == COMMAND_NOT_FOUND:
            logger.info(f"command not found: {self.command}")
            result.state = State.WARN

        return result

    def __repr__(self) -> str:
        return f"ShellAudit({self.command!r})"
