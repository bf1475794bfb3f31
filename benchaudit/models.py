"""Data models for the benchmark runner"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
from pathlib import Path


class State(str, Enum):
    """Terminal classification of a check after a run"""
    PASS = 'PASS'
    FAIL = 'FAIL'
    WARN = 'WARN'
    INFO = 'INFO'

    def __str__(self) -> str:
        return self.value


@dataclass
class Summary:
    """Counts of check states collected during one run"""
    pass_: int = 0
    fail: int = 0
    warn: int = 0
    info: int = 0

    def __post_init__(self):
        """Validate counters"""
        for name in ('pass_', 'fail', 'warn', 'info'):
            if getattr(self, name) < 0:
                raise ValueError(f"Summary counter '{name}' cannot be negative")

    def reset(self) -> None:
        """Set all counters back to zero"""
        self.pass_, self.fail, self.warn, self.info = 0, 0, 0, 0

    def add(self, state: Optional[State]) -> None:
        """Increment the counter that matches the given state"""
        if state == State.PASS:
            self.pass_ += 1
        elif state == State.FAIL:
            self.fail += 1
        elif state == State.WARN:
            self.warn += 1
        elif state == State.INFO:
            self.info += 1

    @property
    def total(self) -> int:
        return self.pass_ + self.fail + self.warn + self.info

    def as_tuple(self):
        return (self.pass_, self.fail, self.warn, self.info)


@dataclass
class AuditResult:
    """Evidence returned by an audit.

    ``state`` is set only when the audit itself decides the outcome
    (for example the command could not be found); tests are skipped then.
    """
    output: str = ''
    error_message: str = ''
    state: Optional[State] = None


@dataclass
class TestOutput:
    """Combined verdict of a test set"""
    __test__ = False

    test_result: bool = False
    actual_result: str = ''
    expected_result: str = ''
    error_message: str = ''


@dataclass
class Config:
    """Configuration for a benchmark run"""
    definitions_file: Optional[str] = None
    defined_constraints: List[str] = field(default_factory=list)
    check_ids: List[str] = field(default_factory=list)
    group_ids: List[str] = field(default_factory=list)
    timeout: int = 60
    boundary_path: str = '/'
    output_format: str = 'text'
    output_file: Optional[str] = None
    no_remediations: bool = False
    include_test_output: bool = False
    log_level: str = 'WARNING'

    VALID_FORMATS = ('text', 'json', 'junit')
    VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

    def __post_init__(self):
        """Validate configuration"""
        if not isinstance(self.defined_constraints, list):
            raise ValueError("Defined constraints must be a list")
        if not isinstance(self.check_ids, list) or not isinstance(self.group_ids, list):
            raise ValueError("Check and group IDs must be lists")
        if self.timeout <= 0:
            raise ValueError("Timeout must be positive")
        if not self.boundary_path:
            raise ValueError("Boundary path cannot be empty")
        if self.output_format not in self.VALID_FORMATS:
            raise ValueError(
                f"Invalid output_format: {self.output_format}. Must be one of {self.VALID_FORMATS}"
            )
        self.log_level = self.log_level.upper()
        if self.log_level not in self.VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. Must be one of {self.VALID_LOG_LEVELS}"
            )

    def validate_paths(self) -> bool:
        """Validate that the definitions file and boundary exist"""
        if not self.definitions_file or not Path(self.definitions_file).is_file():
            return False
        return Path(self.boundary_path).is_dir()

    @classmethod
    def from_yaml(cls, config_file: str) -> 'Config':
        """
        Load configuration from YAML file.

        Args:
            config_file: Path to YAML configuration file

        Returns:
            Config object
        """
        from benchaudit.config import ConfigManager
        return ConfigManager.load_config(config_file=config_file)
