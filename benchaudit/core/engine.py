"""Core engine that loads a benchmark and runs it"""

import logging
from typing import Optional, Tuple

from benchaudit.models import Config, Summary
from benchaudit.audit.registry import AuditFactory, AuditTypeError, AuditTypeRegistry
from benchaudit.controls.group import Controls
from benchaudit.controls.loader import DefinitionError, DefinitionLoader


logger = logging.getLogger(__name__)


def configure_logging(log_level: str) -> None:
    """
    Configure logging for the benchmark runner.

    Installs a single console handler on the package logger.

    Args:
        log_level: Logging level string
    """
    # Convert string to logging level
    numeric_level = getattr(logging, log_level.upper(), logging.WARNING)

    # Configure root logger for benchaudit package
    package_logger = logging.getLogger('benchaudit')
    package_logger.setLevel(numeric_level)

    # Create console handler if not already configured
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(numeric_level)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)

        package_logger.addHandler(handler)
    else:
        for handler in package_logger.handlers:
            handler.setLevel(numeric_level)

    logger.debug(f"Logging configured at {log_level} level")


class BenchEngineError(Exception):
    """Base exception for BenchEngine errors"""
    pass


class BenchEngine:
    """
    Orchestrates a benchmark run.

    Owns the audit type registry, loads the definition file, and runs either
    the configured checks or the configured groups.
    """

    def __init__(self, config: Config, registry: Optional[AuditTypeRegistry] = None, *custom_configs):
        """
        Initialize the engine with configuration.

        Args:
            config: Run configuration
            registry: Audit type registry; the built-in types when omitted
            custom_configs: Objects handed to every audit when it runs
        """
        self.config = config

        configure_logging(config.log_level)

        logger.info("Initializing BenchEngine...")
        logger.info(
            f"Configuration: definitions={config.definitions_file}, "
            f"timeout={config.timeout}s, boundary={config.boundary_path}"
        )

        self.registry = registry or AuditTypeRegistry.with_defaults(
            timeout=config.timeout, boundary_path=config.boundary_path
        )
        self.loader = DefinitionLoader(self.registry, *custom_configs)
        self.controls: Optional[Controls] = None

    def register_audit_type(self, audit_type: str, factory: AuditFactory) -> None:
        """
        Register a custom audit type before the definitions are loaded.

        Raises:
            BenchEngineError: If the registration is rejected
        """
        try:
            self.registry.register(audit_type, factory)
        except AuditTypeError as e:
            raise BenchEngineError(str(e))

    def load(self) -> Controls:
        """
        Load the configured definition file.

        Returns:
            Controls ready to run

        Raises:
            BenchEngineError: If no definition file is configured or it cannot be loaded
        """
        if not self.config.definitions_file:
            raise BenchEngineError("No definitions file configured")

        try:
            self.controls = self.loader.load_file(
                self.config.definitions_file, self.config.defined_constraints
            )
        except DefinitionError as e:
            logger.error(f"Failed to load definitions: {e}")
            raise BenchEngineError(f"Failed to load definitions: {e}")

        logger.info(
            f"Loaded benchmark '{self.controls.id}' with {len(self.controls.groups)} groups"
        )
        return self.controls

    def run(self) -> Tuple[Controls, Summary]:
        """
        Load the definitions and run the selected checks.

        Check IDs take precedence over group IDs; with neither, every group runs.

        Returns:
            Tuple of (controls, summary)

        Raises:
            BenchEngineError: If the definitions cannot be loaded
        """
        controls = self.controls or self.load()

        if self.config.check_ids:
            logger.info(f"Running checks: {', '.join(self.config.check_ids)}")
            summary = controls.run_checks(*self.config.check_ids)
        else:
            if self.config.group_ids:
                logger.info(f"Running groups: {', '.join(self.config.group_ids)}")
            summary = controls.run_group(*self.config.group_ids)

        logger.info(
            f"PASS: {summary.pass_}, FAIL: {summary.fail}, "
            f"WARN: {summary.warn}, INFO: {summary.info}"
        )
        return controls, summary

    @staticmethod
    def exit_code(summary: Summary) -> int:
        """Process exit status for a run: 1 when any check failed"""
        return 1 if summary.fail > 0 else 0
