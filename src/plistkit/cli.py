from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from plistkit.config import resolve_config
from plistkit.exceptions import PlistError
from plistkit.format_codec import Format, create_data, create_with_data
from plistkit.json_io import dump_json_pretty, value_to_json
from plistkit.schema import InspectResponseDTO, PlistkitConfig

app = typer.Typer(add_completion=False)

_STDIO_ALIAS = "-"

logger = logging.getLogger("plistkit.cli")


def _configure(
    config: Optional[Path],
    log_level: Optional[str],
    fmt: Optional[str] = None,
) -> PlistkitConfig:
    settings = resolve_config(config_path=config, overrides={"format": fmt})
    level = (log_level or settings.logging.level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    return settings


def _read_input(path: Path) -> bytes:
    if str(path) == _STDIO_ALIAS:
        return sys.stdin.buffer.read()
    try:
        return path.read_bytes()
    except OSError as exc:
        raise typer.BadParameter(
            f"cannot read {path}: {exc.strerror or exc}", param_hint="INPUT_PATH"
        ) from exc


def _parse_format(name: str) -> Format:
    try:
        return Format.parse(name)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--format") from exc


@app.command()
def convert(
    input_path: Path = typer.Argument(..., help="Property list to read ('-' for stdin)."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write here instead of stdout."),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="openstep, xml or binary."),
    sort_keys: Optional[bool] = typer.Option(None, "--sort-keys/--no-sort-keys"),
    config: Optional[Path] = typer.Option(None, "--config"),
    log_level: Optional[str] = typer.Option(None, "--log-level"),
) -> None:
    """Re-encode a property list in another format."""
    settings = _configure(config, log_level, fmt)
    target = _parse_format(settings.codec.format)
    keep_sorted = settings.codec.sort_keys if sort_keys is None else sort_keys
    try:
        value, detected = create_with_data(_read_input(input_path))
        data = create_data(value, target, sort_keys=keep_sorted)
    except PlistError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    logger.info("converted %s to %s", detected, target)
    if output is None or str(output) == _STDIO_ALIAS:
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
    else:
        output.write_bytes(data)


@app.command()
def inspect(
    input_path: Path = typer.Argument(..., help="Property list to read ('-' for stdin)."),
    config: Optional[Path] = typer.Option(None, "--config"),
    log_level: Optional[str] = typer.Option(None, "--log-level"),
) -> None:
    """Print the detected format and a JSON rendering of a property list."""
    _configure(config, log_level)
    try:
        value, detected = create_with_data(_read_input(input_path))
    except PlistError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    response = InspectResponseDTO(
        format=detected.name.lower(),
        format_description=str(detected),
        kind=value.kind.value,
        value=value_to_json(value),
    )
    typer.echo(dump_json_pretty(response.model_dump()))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
