"""CLI interface for the compliance benchmark runner"""
import click
import sys
import os
import traceback
from benchaudit.config import ConfigManager
from benchaudit.controls.loader import DefinitionError, DefinitionLoader
from benchaudit.core.engine import BenchEngine, BenchEngineError
from benchaudit.report.reporter import ResultReporter, failed_checks


# Error handling utilities
def handle_error(error, verbose=False):
    """Handle and display errors in a user-friendly way"""
    error_msg = str(error)

    # Provide helpful context for common errors
    if "Permission denied" in error_msg or isinstance(error, PermissionError):
        click.echo("✗ Permission denied. Try running with sudo or as root.", err=True)
    elif "No such file or directory" in error_msg or isinstance(error, FileNotFoundError):
        click.echo(f"✗ File or directory not found: {error_msg}", err=True)
    elif isinstance(error, DefinitionError):
        click.echo(f"✗ Invalid benchmark definition: {error_msg}", err=True)
    else:
        click.echo(f"✗ Error: {error_msg}", err=True)

    if verbose:
        click.echo("\nDetailed traceback:", err=True)
        traceback.print_exc()


def load_config_or_exit(config_file, overrides):
    """Load configuration from file and CLI args, exit on error"""
    if config_file and not os.path.exists(config_file):
        click.echo(f"Error: Configuration file not found: {config_file}", err=True)
        sys.exit(1)

    try:
        config = ConfigManager.load_config(config_file=config_file, cli_overrides=overrides)
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error: Failed to load configuration: {e}", err=True)
        sys.exit(1)

    if not config.definitions_file:
        click.echo("Error: Either --definitions or a config file with benchmark.definitions must be specified", err=True)
        sys.exit(1)

    return config


@click.group()
@click.version_option(version='0.1.0')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output', envvar='BENCHAUDIT_VERBOSE')
@click.pass_context
def cli(ctx, verbose):
    """Compliance Benchmark Runner

    Loads a declarative benchmark definition, runs an audit for every check,
    evaluates the output against the check's tests and reports
    PASS/FAIL/WARN/INFO results.

    Environment Variables:
        BENCHAUDIT_VERBOSE: Enable verbose output (1, true, yes)

    Examples:
        benchaudit run --definitions cis.yaml --define platform=ubuntu
        benchaudit run --definitions cis.yaml --check 1.1.1,1.1.2 --json
        benchaudit init-config /etc/benchaudit/config.yaml
    """
    # Store verbose flag in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose

    if verbose:
        click.echo("Verbose mode enabled", err=True)


@cli.command()
@click.option('--definitions', '-d', help='Benchmark definition file (YAML)')
@click.option('--config', 'config_file', help='Path to configuration file')
@click.option('--define', 'define', multiple=True,
              help='Constraint describing this system as key=value (can be specified multiple times)')
@click.option('--check', 'checks', help='Comma separated list of check IDs to run')
@click.option('--group', 'groups', help='Comma separated list of group IDs to run')
@click.option('--json', 'output_format', flag_value='json', help='Report results as JSON')
@click.option('--junit', 'output_format', flag_value='junit', help='Report results as JUnit XML')
@click.option('--output', '-o', 'output_file', help='Output file (default: stdout)')
@click.option('--no-remediations', is_flag=True, help='Leave remediations out of the report')
@click.option('--include-test-output', is_flag=True,
              help='Show the raw audit output of failed checks')
@click.option('--timeout', type=int, help='Seconds to wait for each audit command (default: 60)')
@click.option('--boundary', help='Root directory for file and text searches (default: /)')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
              case_sensitive=False), help='Logging level (default: WARNING)')
@click.pass_context
def run(ctx, definitions, config_file, define, checks, groups, output_format, output_file,
        no_remediations, include_test_output, timeout, boundary, log_level):
    """Run a benchmark

    Runs every group of the definition, or only the selected groups or
    checks, and reports the results. Exits with status 1 when any check
    fails.

    Examples:
        benchaudit run --definitions cis.yaml --define platform=ubuntu --define boot=grub
        benchaudit run --config /etc/benchaudit/config.yaml --group 1.1 --junit -o report.xml
    """
    verbose = ctx.obj.get('verbose', False)

    if verbose and not log_level:
        log_level = 'INFO'

    overrides = {
        'definitions': definitions,
        'define': define,
        'checks': checks,
        'groups': groups,
        'output_format': output_format,
        'output_file': output_file,
        # unset flags leave the configuration file values alone
        'no_remediations': True if no_remediations else None,
        'include_test_output': True if include_test_output else None,
        'timeout': timeout,
        'boundary': boundary,
        'log_level': log_level,
    }
    config = load_config_or_exit(config_file, overrides)

    try:
        engine = BenchEngine(config)
        controls, summary = engine.run()

        reporter = ResultReporter(
            controls,
            summary,
            no_remediations=config.no_remediations,
            include_test_output=config.include_test_output,
        )

        # Output report
        if config.output_file:
            reporter.save_report(config.output_file, config.output_format)
            click.echo(f"✓ Report saved to {config.output_file}", err=True)
        else:
            reporter.print_report(config.output_format)

    except BenchEngineError as e:
        handle_error(e, verbose=verbose)
        sys.exit(1)
    except OSError as e:
        handle_error(e, verbose=verbose)
        sys.exit(1)

    failed = failed_checks(controls)
    if failed and verbose:
        click.echo(f"✗ {len(failed)} check(s) failed: {', '.join(failed)}", err=True)

    sys.exit(BenchEngine.exit_code(summary))


@cli.command('init-config')
@click.argument('path', type=click.Path(dir_okay=False))
@click.option('--force', is_flag=True, help='Overwrite an existing file')
def init_config(path, force):
    """Write a default configuration file

    Example:
        benchaudit init-config /etc/benchaudit/config.yaml
    """
    if os.path.exists(path) and not force:
        click.echo(f"Error: {path} already exists (use --force to overwrite)", err=True)
        sys.exit(1)

    try:
        ConfigManager.create_default_config_file(path)
    except OSError as e:
        handle_error(e)
        sys.exit(1)

    click.echo(f"✓ Configuration written to {path}")


@cli.command()
@click.argument('definitions', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def validate(ctx, definitions):
    """Validate a benchmark definition

    Loads the definition, builds every audit, and prints the number of
    groups and checks.

    Example:
        benchaudit validate cis.yaml
    """
    verbose = ctx.obj.get('verbose', False)

    try:
        controls = DefinitionLoader().load_file(definitions)
    except DefinitionError as e:
        handle_error(e, verbose=verbose)
        sys.exit(1)

    click.echo(f"✓ {definitions} is valid")
    click.echo(f"  Benchmark: {controls.id} {controls.text}".rstrip())
    click.echo(f"  Groups: {len(controls.groups)}")
    click.echo(f"  Checks: {controls.check_count}")


def main():
    """Main entry point for the CLI"""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\n\nOperation cancelled by user", err=True)
        sys.exit(130)
    except Exception as e:
        # Check if verbose mode is enabled via environment variable
        verbose = os.environ.get('BENCHAUDIT_VERBOSE', '').lower() in ('1', 'true', 'yes')
        handle_error(e, verbose=verbose)
        sys.exit(1)


if __name__ == '__main__':
    main()
