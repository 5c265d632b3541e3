"""Command line interface for stylemerge."""

from __future__ import annotations

import json
import sys
import time
from pathlib import Path

import click
import typer
from rich.console import Console

from . import __version__
from . import config as config_module
from .api import StyleMerge, config_overrides, write_output
from .config import config_from_json, load_config
from .errors import StyleMergeError
from .log import configure_logging
from .models import BuildResult
from .output import format_status_icon
from .services.system_service import DoctorCheckResult, run_all_doctor_checks
from .syntax import TARGET_SYNTAXES
from .text import Messages, Styles
from .utils import format_path, plural

console = Console()
err_console = Console(stderr=True)
_TARGET_CHOICE = click.Choice([syntax.value for syntax in TARGET_SYNTAXES], case_sensitive=False)

app = typer.Typer(
    help=Messages.APP_HELP,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"stylemerge v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    )
) -> None:
    """Global Typer callback for shared options."""
    return None


@app.command()
def build(
    input_path: Path = typer.Option(
        ...,
        "--input",
        "-i",
        help=Messages.HELP_INPUT,
    ),
    output_path: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help=Messages.HELP_OUTPUT,
    ),
    target: str | None = typer.Option(
        None,
        "--target",
        "-t",
        click_type=_TARGET_CHOICE,
        help=Messages.HELP_TARGET,
    ),
    binary: str | None = typer.Option(
        None,
        "--binary",
        "-b",
        help=Messages.HELP_BINARY,
    ),
    optimize: bool = typer.Option(
        False,
        "--optimize",
        help=Messages.HELP_OPTIMIZE,
    ),
    watch: bool = typer.Option(
        False,
        "--watch",
        "-w",
        help=Messages.HELP_WATCH,
    ),
    manifest: Path | None = typer.Option(
        None,
        "--manifest",
        "-m",
        help=Messages.HELP_MANIFEST,
    ),
    public_path: str | None = typer.Option(
        None,
        "--public",
        "-p",
        help=Messages.HELP_PUBLIC,
    ),
    polling: bool = typer.Option(
        False,
        "--polling",
        help=Messages.HELP_POLLING,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help=Messages.HELP_VERBOSE,
    ),
) -> None:
    """Merge a stylesheet and everything it imports into one file."""
    configure_logging(verbose)
    overrides = config_overrides(
        {
            "target": target,
            "binary": binary,
            "manifest": str(manifest) if manifest is not None else None,
            "public_path": public_path,
        }
    )
    if optimize:
        overrides["optimize_redundant_variables"] = True
        overrides["optimize_redundant_functions_and_mixins"] = True
    if polling:
        overrides["use_polling"] = True

    try:
        effective = config_from_json(overrides, base=load_config())
        session = StyleMerge(input_path, effective)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if watch:
        _watch(session, output_path)
        return

    try:
        document = session.build()
    except StyleMergeError as exc:
        err_console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)

    if output_path is None:
        sys.stdout.write(document)
        return
    saved = write_output(output_path, document, encoding=effective.encoding)
    console.print(
        _styled(Messages.INFO_OUTPUT_SAVED.format(path=format_path(saved)), Styles.SUCCESS)
    )


def _watch(session: StyleMerge, output_path: Path | None) -> None:
    def _on_start() -> None:
        console.print(_styled(Messages.INFO_BUILD_RUNNING, Styles.INFO))

    def _on_ready(result: BuildResult, took: float) -> None:
        if output_path is not None:
            write_output(output_path, result.document, encoding=session.config.encoding)
        else:
            sys.stdout.write(result.document)
        console.print(_styled(Messages.INFO_BUILD_DONE.format(took=round(took)), Styles.SUCCESS))
        count = len(watcher.watched_files)
        console.print(
            _styled(
                Messages.INFO_WATCH_STARTED.format(count=count, plural=plural(count)),
                Styles.INFO,
            )
        )

    def _on_error(exc: StyleMergeError, took: float) -> None:
        console.print(_styled(Messages.ERROR_BUILD_FAILED.format(took=round(took)), Styles.ERROR))
        err_console.print(_styled(str(exc), Styles.ERROR))

    watcher = session.create_watcher(
        on_start=_on_start,
        on_ready=_on_ready,
        on_error=_on_error,
    )
    with watcher:
        try:
            _wait_for_interrupt()
        except KeyboardInterrupt:
            pass
    console.print(_styled(Messages.INFO_WATCH_STOPPED, Styles.INFO))


def _wait_for_interrupt() -> None:
    while True:
        time.sleep(1.0)


@app.command()
def config(
    show: bool = typer.Option(
        False,
        "--show",
        help=Messages.HELP_SHOW_CONFIG,
    ),
    set_binary_option: str | None = typer.Option(
        None,
        "--set-binary",
        help=Messages.HELP_SET_BINARY,
    ),
    set_target_option: str | None = typer.Option(
        None,
        "--set-target",
        click_type=_TARGET_CHOICE,
        help=Messages.HELP_SET_TARGET,
    ),
    set_max_output_option: int | None = typer.Option(
        None,
        "--set-max-output",
        help=Messages.HELP_SET_MAX_OUTPUT,
    ),
    set_public_path_option: str | None = typer.Option(
        None,
        "--set-public-path",
        help=Messages.HELP_SET_PUBLIC_PATH,
    ),
    reset: bool = typer.Option(
        False,
        "--reset",
        help=Messages.HELP_RESET_CONFIG,
    ),
) -> None:
    """Manage stored defaults."""
    changed = False
    try:
        if reset:
            config_module.reset_config()
            console.print(_styled(Messages.INFO_CONFIG_RESET, Styles.SUCCESS))
        if set_binary_option is not None:
            config_module.set_binary(set_binary_option)
            changed = True
        if set_target_option is not None:
            config_module.set_target(set_target_option)
            changed = True
        if set_max_output_option is not None:
            config_module.set_max_output(set_max_output_option)
            changed = True
        if set_public_path_option is not None:
            config_module.set_public_path(set_public_path_option)
            changed = True
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if changed:
        console.print(_styled(Messages.INFO_CONFIG_UPDATED, Styles.SUCCESS))
    if show or not (changed or reset):
        _show_config()


def _show_config() -> None:
    try:
        cfg = load_config()
    except (json.JSONDecodeError, ValueError, OSError) as exc:
        err_console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)
    console.print(
        _styled(
            Messages.INFO_CONFIG_SUMMARY.format(
                path=config_module.config_file_path(),
                binary=cfg.binary or config_module.DEFAULT_BINARY_NAME,
                target=cfg.target,
                max_output=cfg.max_output,
                timeout=cfg.convert_timeout,
                public_path=cfg.public_path or "-",
                manifest=cfg.manifest or "-",
            ),
            Styles.INFO,
        )
    )


@app.command(help=Messages.HELP_DOCTOR)
def doctor() -> None:
    """Run diagnostic checks for the stylemerge installation."""
    console.print(_styled(Messages.DOCTOR_TITLE.format(version=__version__), Styles.TITLE))
    console.print()

    try:
        binary = load_config().binary
    except (json.JSONDecodeError, ValueError, OSError):
        # the config check below reports the broken file
        binary = None

    results: list[DoctorCheckResult] = run_all_doctor_checks(binary)
    has_failure = False
    for result in results:
        icon = format_status_icon(result.passed, console=console)
        if not result.passed:
            has_failure = True

        console.print(f"  {icon} [bold]{result.name}:[/bold] {result.message}")
        if result.detail:
            console.print(f"      [dim]{result.detail}[/dim]")

    console.print()
    if has_failure:
        console.print(_styled(Messages.DOCTOR_SOME_FAILED, Styles.WARNING))
        raise typer.Exit(code=1)
    console.print(_styled(Messages.DOCTOR_ALL_PASSED, Styles.SUCCESS))


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    if argv is None:
        app()
    else:
        app(args=list(argv))
