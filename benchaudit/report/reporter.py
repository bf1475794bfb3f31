"""Benchmark result report generation"""

import json
import xml.etree.ElementTree as ET
from typing import List, Optional

import click

from benchaudit.models import State, Summary
from benchaudit.controls.group import Controls

STATE_COLORS = {
    State.PASS: 'green',
    State.FAIL: 'red',
    State.WARN: 'yellow',
    State.INFO: 'blue',
}

SUPPORTED_FORMATS = ('text', 'json', 'junit')


class ResultReporter:
    """Generates reports of a benchmark run in various formats"""

    def __init__(self, controls: Controls, summary: Optional[Summary] = None,
                 no_remediations: bool = False, include_test_output: bool = False):
        """
        Initialize reporter with the results of a run

        Args:
            controls: Controls after run_group or run_checks
            summary: Summary of the run; the controls' own summary when omitted
            no_remediations: Leave remediations out of the text report
            include_test_output: Show the raw output of failed checks in the text report
        """
        self.controls = controls
        self.summary = summary if summary is not None else controls.summary
        self.no_remediations = no_remediations
        self.include_test_output = include_test_output

    @staticmethod
    def _state_line(state: Optional[State], text: str, color: bool) -> str:
        label = f"[{state}]" if state is not None else "[    ]"
        if color and state is not None:
            label = click.style(label, fg=STATE_COLORS[state])
        return f"{label} {text}"

    def generate_text_report(self, color: bool = False) -> str:
        """
        Generate a text format report

        Args:
            color: Colour the state labels with ANSI escapes

        Returns:
            Report as plain text string
        """
        lines = []
        lines.append(self._state_line(State.INFO, f"{self.controls.id} {self.controls.text}", color))

        for group in self.controls.results:
            lines.append(self._state_line(State.INFO, f"{group.id} {group.text}", color))
            for check in group.checks:
                lines.append(self._state_line(check.state, f"{check.id} {check.text}", color))

                if self.include_test_output and check.state == State.FAIL and check.actual_value:
                    for raw_line in check.actual_value.split('\n'):
                        lines.append(f"\t {raw_line}")

        lines.append("")

        # Remediations for everything that did not pass
        summary = self.summary
        if not self.no_remediations and (summary.fail or summary.warn or summary.info):
            heading = "== Remediations =="
            lines.append(click.style(heading, fg=STATE_COLORS[State.WARN]) if color else heading)
            for group in self.controls.results:
                for check in group.checks:
                    if check.state != State.PASS:
                        lines.append(f"{check.id} {check.remediation}")
            lines.append("")

        # Summary heading takes the colour of the most severe state
        if summary.fail:
            worst = State.FAIL
        elif summary.warn:
            worst = State.WARN
        elif summary.info:
            worst = State.INFO
        else:
            worst = State.PASS

        heading = "== Summary =="
        lines.append(click.style(heading, fg=STATE_COLORS[worst]) if color else heading)
        lines.append(f"{summary.pass_} checks PASS")
        lines.append(f"{summary.fail} checks FAIL")
        lines.append(f"{summary.warn} checks WARN")
        lines.append(f"{summary.info} checks INFO")

        return "\n".join(lines) + "\n"

    def _report_dict(self) -> dict:
        report = self.controls.to_dict()
        report['total_pass'] = self.summary.pass_
        report['total_fail'] = self.summary.fail
        report['total_warn'] = self.summary.warn
        report['total_info'] = self.summary.info
        return report

    def generate_json_report(self) -> str:
        """
        Generate a JSON format report

        Returns:
            Report as JSON string
        """
        return json.dumps(self._report_dict(), indent=2)

    def generate_junit_report(self) -> str:
        """
        Generate a JUnit XML report

        Every check becomes a test case. FAIL is reported as a failure,
        WARN and INFO as skipped; the check's JSON is kept in system-out.

        Returns:
            Report as XML string
        """
        summary = self.summary
        suite = ET.Element('testsuite', {
            'name': self.controls.text,
            'tests': str(summary.total),
            'failures': str(summary.fail),
            'errors': '0',
            'time': '0',
        })

        for group in self.controls.results:
            for check in group.checks:
                case = ET.SubElement(suite, 'testcase', {
                    'name': f"{check.id} {check.text}",
                    'classname': group.text,
                    'time': '0',
                })
                if check.state == State.FAIL:
                    failure = ET.SubElement(case, 'failure', {'type': ''})
                    failure.text = check.expected_result
                elif check.state in (State.WARN, State.INFO):
                    ET.SubElement(case, 'skipped')

                system_out = ET.SubElement(case, 'system-out')
                system_out.text = json.dumps(check.to_dict())

        ET.indent(suite, space='    ')
        return ET.tostring(suite, encoding='unicode') + "\n"

    def generate_report(self, format: str = 'text', color: bool = False) -> str:
        """
        Generate report in specified format

        Args:
            format: Report format ('text', 'json', or 'junit')
            color: Colour the text report

        Returns:
            Report as string

        Raises:
            ValueError: If format is not supported
        """
        format = format.lower()

        if format == 'text':
            return self.generate_text_report(color=color)
        elif format == 'json':
            return self.generate_json_report()
        elif format == 'junit':
            return self.generate_junit_report()
        else:
            raise ValueError(f"Unsupported format: {format}. Use 'text', 'json', or 'junit'")

    def save_report(self, output_path: str, format: str = 'text'):
        """
        Generate and save report to file

        Args:
            output_path: Path to save the report
            format: Report format ('text', 'json', or 'junit')
        """
        report = self.generate_report(format)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(report)

    def print_report(self, format: str = 'text'):
        """
        Generate and print report to stdout

        Args:
            format: Report format ('text', 'json', or 'junit')
        """
        report = self.generate_report(format, color=True)
        click.echo(report, nl=False)


def failed_checks(controls: Controls) -> List[str]:
    """IDs of the checks that failed in the last run"""
    return [
        check.id
        for group in controls.results
        for check in group.checks
        if check.state == State.FAIL
    ]
