"""Command line entry point."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
import structlog

from diffshot import __version__
from diffshot.config.logging import setup_logging
from diffshot.config.settings import get_settings
from diffshot.constants import MAX_RETRY
from diffshot.exceptions import DiffshotError, ThresholdExceededError, ValidationError
from diffshot.models.domain import RunOptions
from diffshot.pipeline import run_compare, run_snapshot
from diffshot.storage.artifacts import OutputStore

logger = structlog.get_logger(__name__)

_settings = get_settings()


def _from_command_line(ctx: click.Context, param: click.Parameter) -> bool:
    return ctx.get_parameter_source(param.name) is not click.core.ParameterSource.DEFAULT


def _valid_output(ctx: click.Context, param: click.Parameter, value: str) -> Path:
    path = Path(value).expanduser()
    if not _from_command_line(ctx, param):
        path.mkdir(parents=True, exist_ok=True)
    try:
        return OutputStore(path).base_dir
    except ValidationError as e:
        raise click.BadParameter(str(e)) from e


def _valid_retry(ctx: click.Context, param: click.Parameter, value: int) -> int:
    # The default of zero is allowed, an explicit zero is not
    if _from_command_line(ctx, param) and not 1 <= value <= MAX_RETRY:
        msg = f'invalid retry counts "{value}"'
        raise click.BadParameter(msg)
    return value


def _valid_threshold(ctx: click.Context, param: click.Parameter, value: float) -> float:
    if not 0 <= value <= 100:
        msg = f'invalid threshold percentage "{value:g}"'
        raise click.BadParameter(msg)
    return value


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version")
@click.option(
    "--emulate",
    "-e",
    default=_settings.default_device,
    show_default=True,
    help="Device profile to emulate.",
)
@click.option(
    "--output",
    "-o",
    default=_settings.output_dir,
    show_default=True,
    callback=_valid_output,
    help="Output directory for images.",
)
@click.option(
    "--retry",
    "-r",
    type=int,
    default=0,
    show_default=True,
    callback=_valid_retry,
    help=f"Retries per capture (1-{MAX_RETRY}).",
)
@click.option("--show", "-s", is_flag=True, help="Show the browser window for debugging.")
@click.option(
    "--threshold",
    "-t",
    type=float,
    default=_settings.default_threshold,
    show_default=True,
    callback=_valid_threshold,
    help="Mismatch percentage above which a comparison fails.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--json-logs", is_flag=True, default=_settings.json_logs, help="Emit JSON logs.")
@click.argument("urls", nargs=-1, metavar="<url> [<after url>]")
@click.pass_context
def cli(
    ctx: click.Context,
    emulate: str,
    output: Path,
    retry: int,
    show: bool,
    threshold: float,
    verbose: bool,
    json_logs: bool,
    urls: tuple[str, ...],
) -> None:
    """Capture <url>, or capture <before url> and <after url> and diff them."""
    if len(urls) not in (1, 2):
        raise click.UsageError("expected one URL or a before and an after URL", ctx=ctx)

    setup_logging(log_level="DEBUG" if verbose else _settings.log_level, json_output=json_logs)
    options = RunOptions(
        emulate=emulate, output_dir=output, retry=retry, show=show, threshold=threshold
    )
    logger.info(
        "run_start",
        mode="snapshot" if len(urls) == 1 else "compare",
        device=emulate,
        output=str(output),
        retry=retry,
    )

    try:
        if len(urls) == 1:
            result = asyncio.run(run_snapshot(options, urls[0], settings=_settings))
            click.echo(str(result.path))
        else:
            diff = asyncio.run(run_compare(options, urls[0], urls[1], settings=_settings))
            click.echo(
                f"{diff.mismatch_percentage:.2f}% mismatch, diff written to {diff.diff_image_path}"
            )
    except ValidationError as e:
        raise click.UsageError(str(e), ctx=ctx) from e
    except ThresholdExceededError as e:
        click.echo(f"Regression: {e}", err=True)
        sys.exit(1)
    except DiffshotError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
