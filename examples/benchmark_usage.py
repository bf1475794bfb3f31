"""Example usage of the benchmark runner as a library"""

import os
import tempfile
from pathlib import Path

from benchaudit.audit.base import Auditer
from benchaudit.audit.registry import AuditTypeRegistry
from benchaudit.controls.loader import DefinitionLoader
from benchaudit.models import AuditResult
from benchaudit.report.reporter import ResultReporter


EXAMPLE_DEFINITION = Path(__file__).parent / 'sshd_benchmark.yaml'


class EnvironmentAudit(Auditer):
    """Reports an environment variable as ``NAME=value``"""

    def __init__(self, name):
        self.name = name

    def describe(self):
        return f"env {self.name}"

    def execute(self, *custom_configs):
        return AuditResult(output=f"{self.name}={os.environ.get(self.name, '')}\n")


def main():
    """Run the SSH benchmark against a sandboxed file system"""

    with tempfile.TemporaryDirectory() as tmpdir:
        print(f"Creating sandbox in: {tmpdir}\n")

        # A minimal /etc/ssh below the sandbox
        ssh_dir = Path(tmpdir) / 'etc' / 'ssh'
        ssh_dir.mkdir(parents=True)
        sshd_config = ssh_dir / 'sshd_config'
        sshd_config.write_text(
            "# Example configuration\n"
            "PermitRootLogin no\n"
            "Protocol 2\n"
        )
        os.chmod(sshd_config, 0o644)  # Group and others can read it
        print(f"Created {sshd_config} with mode 644")

        print("\n" + "=" * 80)
        print("RUNNING BENCHMARK")
        print("=" * 80 + "\n")

        # File and text searches only see the sandbox
        registry = AuditTypeRegistry.with_defaults(timeout=10, boundary_path=tmpdir)
        registry.register('env', lambda payload: EnvironmentAudit(str(payload)))

        loader = DefinitionLoader(registry)
        controls = loader.load_file(str(EXAMPLE_DEFINITION), ['platform=ubuntu'])
        summary = controls.run_group()

        reporter = ResultReporter(controls, summary)
        reporter.print_report('text')

        print("\n" + "=" * 80)
        print("FIXING 5.2.1 AND RUNNING IT AGAIN")
        print("=" * 80 + "\n")

        os.chmod(sshd_config, 0o600)
        summary = controls.run_checks('5.2.1')
        for group in controls.results:
            for check in group.checks:
                print(f"{check.id}: {check.state} ({check.expected_result})")

        print(f"\nPASS: {summary.pass_}, FAIL: {summary.fail}, "
              f"WARN: {summary.warn}, INFO: {summary.info}")

        print("\n" + "=" * 80)
        print("CUSTOM AUDIT TYPE")
        print("=" * 80 + "\n")

        controls = loader.load(CUSTOM_DEFINITION)
        controls.run_group()
        ResultReporter(controls, no_remediations=True).print_report('text')


CUSTOM_DEFINITION = """
id: "9"
text: "Session settings"
groups:
  - id: "9.1"
    text: "Shell environment"
    checks:
      - id: "9.1.1"
        text: "Ensure TMOUT is at most 900 seconds"
        audit_type: env
        audit: TMOUT
        tests:
          test_items:
            - flag: TMOUT
              compare:
                op: lte
                value: 900
        remediation: "export TMOUT=900 in /etc/profile.d/tmout.sh"
        scored: true
"""


if __name__ == '__main__':
    main()
