import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from fiji_packager.bundle.layout import DEFAULT_PREFIX
from fiji_packager.bundle.packager import package
from fiji_packager.config import PackageConfig
from fiji_packager.errors import ConfigError, PackagerError
from fiji_packager.logger import setup_logger
from fiji_packager.platforms import current_platform
from fiji_packager.progress import ConsoleProgress, LoggingProgress


class RegistryChoice(str, Enum):
    updater = "updater"
    legacy = "legacy"


app = typer.Typer(
    name="fiji-packager",
    help="Package a staged Fiji installation into a distributable archive",
    add_completion=False,
)

@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
):

    setup_logger(verbose=verbose)

@app.command("package")
def package_command(
    output: Path = typer.Argument(
        ...,
        help="Archive to create: .zip, .tar, .tar.gz/.tgz or .tar.bz2/.tbz",
    ),
    jre: bool = typer.Option(
        False,
        "--jre/--no-jre",
        help="Include the newest JRE of every requested platform",
    ),
    platforms: str = typer.Option(
        "",
        "--platforms",
        "-p",
        help="Comma-separated platforms to package for (empty: all)",
    ),
    root: Optional[Path] = typer.Option(
        None,
        "--root",
        "-r",
        envvar="IJ_DIR",
        help="Root of the staged installation",
    ),
    prefix: str = typer.Option(
        DEFAULT_PREFIX,
        "--prefix",
        help="Top-level directory inside the archive",
    ),
    registry: RegistryChoice = typer.Option(
        RegistryChoice.updater,
        "--registry",
        case_sensitive=False,
        help="Enumerate files from the update database or by scanning the tree",
    ),
    show_progress: bool = typer.Option(
        True,
        "--progress/--no-progress",
        help="Show a progress bar while writing",
    ),
):

    try:
        try:
            config = PackageConfig(
                output=output,
                root=root,
                include_runtime=jre,
                platforms=platforms,
                prefix=prefix,
                registry=registry.value,
            )
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc

        typer.echo(f"Packaging {config.root or '<unset>'} into {config.output}")

        progress = ConsoleProgress() if show_progress else LoggingProgress()
        with progress:
            result = package(config, progress=progress)

        if result.dropped:
            typer.secho(
                f"Skipped {len(result.dropped)} file(s) with names that are too long",
                fg=typer.colors.YELLOW,
                err=True,
            )
        typer.echo("Package complete!")
        typer.echo(f"Archive created at: {result.output} ({result.written} files)")

    except PackagerError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        typer.secho(f"Error writing {output}", fg=typer.colors.RED, err=True)
        sys.exit(exc.exit_code)

    except Exception:
        typer.secho(
            "Internal error occurred. Run with --verbose for details.",
            fg=typer.colors.RED,
            err=True,
        )
        raise


@app.command("platform")
def platform_command():
    """Print the platform identifier of this machine."""
    typer.echo(current_platform())

def run_cli() -> None:
    app()


if __name__ == "__main__":
    run_cli()
