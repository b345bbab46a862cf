# codepack/cli/interface.py
import sys
from pathlib import Path
from typing import Any, Dict

import click
from click_option_group import optgroup
import structlog

from codepack import __version__ as app_version
from codepack.config.settings import (
    PackConfig, IgnoreErrorPolicy, DEFAULT_IGNORE_ERROR_POLICY, DEFAULT_CONSOLE_SHOW_SUMMARY,
)
from codepack.config.loader import load_and_merge_configs, build_effective_options
from codepack.logging_setup import configure_logging
from codepack.core.pipeline import CodePacker, PackResult
from codepack.exceptions import CodePackError, ConfigError

log = structlog.get_logger(__name__)

EPILOG = """\b
Examples:
  codepack --indir ./myproject --outfile output.txt --verbose
  codepack --indir /path/to/code/project --force

\b
The program will:
1. Walk through all files in the input directory
2. Identify code files by their extensions
3. Add appropriate comment markers for each language
4. Concatenate all code files into a single output file
"""

# CLI parameter name -> PackConfig attribute, for values given on the command line.
CLI_PARAM_TO_PACKCONFIG_ATTR: Dict[str, str] = {
    "input_dir": "input_dir",
    "output_file": "output_file",
    "force": "force",
    "exclude_patterns": "exclude_patterns",
    "no_ignore": "no_ignore",
    "ignore_error_policy_str": "ignore_error_policy",
    "console_show_summary": "console_show_summary",
}


def _print_cli_summary_output(result: PackResult):
    click.secho("--- pack summary ---", fg="cyan", err=True)
    click.echo(f"Output file: {result.output_path}", err=True)
    click.echo(f"Files packed: {len(result.packed_files)}", err=True)
    for reason, count in sorted(result.skipped.items()):
        click.echo(f"Skipped ({reason.replace('_', ' ')}): {count}", err=True)
    if result.ignore_rules is not None:
        click.echo(
            f"Ignore rules: {len(result.ignore_rules.patterns)} pattern(s) from {result.ignore_rules.base_dir}",
            err=True,
        )


def _build_config(ctx: click.Context, cli_params: Dict[str, Any]) -> PackConfig:
    # defaults < config files < profile < explicit command-line values.
    raw_configs = load_and_merge_configs()
    effective_options = build_effective_options(raw_configs, cli_params.get("active_config_profile_name"))

    for param_name, pc_attr in CLI_PARAM_TO_PACKCONFIG_ATTR.items():
        if ctx.get_parameter_source(param_name) != click.core.ParameterSource.COMMANDLINE:
            continue
        value = cli_params[param_name]
        if param_name == "ignore_error_policy_str":
            value = IgnoreErrorPolicy.from_string(value)
        elif param_name == "exclude_patterns":
            value = list(value)
        effective_options[pc_attr] = value

    if cli_params.get("verbosity_level", 0) > 0:
        effective_options["verbose"] = True
    return PackConfig(**effective_options)


@click.command(context_settings=dict(help_option_names=["-h", "--help"]), epilog=EPILOG)
@optgroup.group("Input / Output", help="Where to read code from and where to write the packed file.")
@optgroup.option("--indir", "input_dir", type=click.Path(path_type=Path), default=Path("."), help="Input directory to process. Default: '.'.")
@optgroup.option("--outfile", "output_file", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Output file path, relative to the current directory. Default: input directory name + '.txt'.")
@optgroup.option("--force", "force", is_flag=True, default=False, help="Force overwrite of an existing output file.")
@optgroup.group("Filtering Options", help="Control which files and directories are packed.")
@optgroup.option("-e", "--exclude", "exclude_patterns", multiple=True, help="Extra gitwildmatch patterns (relative to the input directory) to exclude.")
@optgroup.option("--no-ignore", "no_ignore", is_flag=True, default=False, help="Disable .gitignore and built-in exclusions.")
@optgroup.option("--ignore-errors", "ignore_error_policy_str", type=click.Choice([p.value for p in IgnoreErrorPolicy]), default=DEFAULT_IGNORE_ERROR_POLICY.value, help=f"What to do when a .gitignore cannot be read. Default: {DEFAULT_IGNORE_ERROR_POLICY.value}.")
@optgroup.group("Application Behavior", help="Configuration profiles, console feedback and logging.")
@optgroup.option("--config-profile", "active_config_profile_name", default=None, help="Load a profile from config file(s).")
@optgroup.option("--summary/--no-summary", "console_show_summary", default=DEFAULT_CONSOLE_SHOW_SUMMARY, help="Print a pack summary to stderr.")
@optgroup.option("--verbose", "-v", "verbosity_level", count=True, help="Verbose output: -v lists every file decision, -vv adds debug logs.")
@optgroup.option("--force-json-logs", "force_json_logs_cli", is_flag=True, default=False, help="Force JSON logs.")
@click.version_option(version=app_version, package_name="codepack", prog_name="codepack", help="Show version and exit.")
@click.pass_context
def main_cli(ctx: click.Context, **cli_params: Any):
    """codepack: concatenate source code files with appropriate comment markers."""

    log_level = "warning"
    if cli_params.get("verbosity_level", 0) == 1: log_level = "info"
    elif cli_params.get("verbosity_level", 0) >= 2: log_level = "debug"
    configure_logging(log_level_str=log_level, force_json_logs=cli_params.get("force_json_logs_cli", False))

    log.debug("cli_command_invoked", params=cli_params)

    try:
        config = _build_config(ctx, cli_params)
        if config.verbose and log_level == "warning":
            # verbose enabled from a config file or profile rather than -v.
            log_level = "info"
            configure_logging(log_level_str=log_level, force_json_logs=cli_params.get("force_json_logs_cli", False))
        packer = CodePacker(
            config,
            echo=lambda message: click.echo(message, err=True),
            warn=lambda message: click.secho(message, fg="yellow", err=True),
        )
        result = packer.pack()

        if config.console_show_summary:
            _print_cli_summary_output(result)

    except (ConfigError, CodePackError) as e:
        log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    except OSError as e:
        log.critical("unexpected_os_error_in_cli", message=str(e), exc_info=True)
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
