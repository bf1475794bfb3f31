"""Shared pytest fixtures and configuration for benchaudit tests"""

import os
import sys
import tempfile
import shutil
from pathlib import Path
import pytest

from benchaudit.audit.base import Auditer
from benchaudit.audit.registry import AuditTypeRegistry
from benchaudit.models import AuditResult, Config, State


class StaticAudit(Auditer):
    """Auditer returning a fixed result, counting its calls"""

    def __init__(self, output='', error_message='', state=None):
        self.output = output
        self.error_message = error_message
        self.state = state
        self.calls = 0
        self.received_configs = ()

    def execute(self, *custom_configs):
        self.calls += 1
        self.received_configs = custom_configs
        return AuditResult(output=self.output, error_message=self.error_message, state=self.state)


def static_audit_factory(payload):
    """Build a StaticAudit from a mapping payload such as {output: ..., state: FAIL}"""
    payload = payload or {}
    if not isinstance(payload, dict):
        payload = {'output': payload}
    state = payload.get('state')
    return StaticAudit(
        output=str(payload.get('output', '')),
        error_message=str(payload.get('error', '')),
        state=State(state) if state else None,
    )


SAMPLE_DEFINITION = """---
id: 1
text: "Master Node Security Configuration"
groups:
  - id: 1.1
    text: "API Server"
    checks:
      - id: 1.1.1
        text: "Ensure that the --allow-privileged argument is set to false"
        audit_type: static
        audit:
          output: "--allow-privileged=false --secure-port=6443"
        tests:
          test_items:
            - flag: "--allow-privileged"
              compare:
                op: eq
                value: false
              set: true
        remediation: "Set --allow-privileged=false"
        scored: true
      - id: 1.1.2
        text: "Audit reports a failure on its own"
        audit_type: static
        audit:
          state: FAIL
          error: "no such file"
        tests:
          test_items:
            - flag: "anything"
        remediation: "Make it work"
        scored: true
      - id: 1.1.3
        text: "Secure port is 443"
        audit_type: static
        audit:
          output: "--secure-port=6443"
        tests:
          test_items:
            - flag: "--secure-port"
              compare:
                op: eq
                value: 443
        remediation: "Set --secure-port=443"
        scored: true
      - id: 1.1.4
        text: "Skipped check"
        type: skip
        audit_type: static
        audit:
          output: "ignored"
        tests:
          test_items:
            - flag: "ignored"
        remediation: "Nothing to do"
        scored: true
  - id: 2.1
    text: "Kubelet"
    type: skip
    checks:
      - id: 2.1.1
        text: "Skipped with its group"
        audit_type: static
        audit:
          output: "--anonymous-auth=false"
        tests:
          test_items:
            - flag: "--anonymous-auth"
              compare:
                op: eq
                value: false
        scored: true
"""


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing"""
    tmpdir = tempfile.mkdtemp(prefix='benchaudit_test_')
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def registry():
    """Registry with the built-in types plus the static test audit"""
    reg = AuditTypeRegistry.with_defaults(timeout=5)
    reg.register('static', static_audit_factory)
    return reg


@pytest.fixture
def sample_definition():
    """Benchmark definition exercising every check outcome"""
    return SAMPLE_DEFINITION


@pytest.fixture
def definition_file(temp_dir):
    """Write a definition that only uses shell audits"""
    path = Path(temp_dir) / 'benchmark.yaml'
    path.write_text("""---
id: "1"
text: "Shell Benchmark"
groups:
  - id: "1.1"
    text: "Shell checks"
    checks:
      - id: "1.1.1"
        text: "Echo reports enabled"
        audit: "echo 'enabled=true'"
        tests:
          test_items:
            - flag: "enabled"
              compare:
                op: eq
                value: true
        remediation: "Enable it"
        scored: true
      - id: "1.1.2"
        text: "Echo reports the wrong port"
        audit: "echo 'port=80'"
        tests:
          test_items:
            - flag: "port"
              compare:
                op: eq
                value: 443
        remediation: "Use port 443"
        scored: true
""")
    return str(path)


@pytest.fixture
def passing_definition_file(temp_dir):
    """Write a definition whose only check passes"""
    path = Path(temp_dir) / 'passing.yaml'
    path.write_text("""---
id: "1"
text: "Passing Benchmark"
groups:
  - id: "1.1"
    text: "Shell checks"
    checks:
      - id: "1.1.1"
        text: "Echo reports enabled"
        audit: "echo 'enabled=true'"
        tests:
          test_items:
            - flag: "enabled"
        scored: true
""")
    return str(path)


@pytest.fixture
def test_config(definition_file, temp_dir):
    """Create a test configuration"""
    return Config(
        definitions_file=definition_file,
        defined_constraints=['platform=ubuntu'],
        timeout=5,
        boundary_path=temp_dir,
    )


@pytest.fixture
def config_yaml_file(temp_dir, definition_file):
    """Create a test YAML configuration file"""
    config_path = Path(temp_dir) / 'config.yaml'
    config_content = f"""
benchmark:
  definitions: {definition_file}
  define:
    - platform=ubuntu
    - boot=grub
  checks: "1.1.1, 1.1.2,"

execution:
  timeout: 30
  boundary: {temp_dir}

output:
  format: json
  no_remediations: true

logging:
  level: info
"""
    config_path.write_text(config_content)
    return str(config_path)


# Platform-specific fixtures
@pytest.fixture
def skip_on_windows():
    """Skip test on Windows platform"""
    if sys.platform == 'win32':
        pytest.skip("Test not supported on Windows")


# Helper functions available to all tests
def create_file_with_permissions(path, mode=0o644, content=''):
    """Create a file with specific permissions (Unix only)"""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    Path(path).write_text(content)
    if sys.platform != 'win32':
        os.chmod(path, mode)
    return path


def create_directory_structure(base_dir, structure):
    """
    Create a directory structure from a dict.

    Example:
        structure = {
            'etc': {
                'ssh': {
                    'sshd_config': 'PermitRootLogin no'
                }
            }
        }
    """
    for name, content in structure.items():
        path = Path(base_dir) / name
        if isinstance(content, dict):
            path.mkdir(parents=True, exist_ok=True)
            create_directory_structure(path, content)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)


@pytest.fixture
def create_file_helper():
    """Fixture that provides create_file_with_permissions function"""
    return create_file_with_permissions


@pytest.fixture
def create_structure_helper():
    """Fixture that provides create_directory_structure function"""
    return create_directory_structure


# Markers for test categorization
def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "requires_unix: mark test as requiring Unix platform"
    )
