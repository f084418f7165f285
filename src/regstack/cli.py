# src/regstack/cli.py
"""regstack Command Line Interface.

Entry point for the regstack CLI tool.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from regstack import __version__
from regstack.contracts.errors import (
    ConfigValidationError,
    InvalidCombinationError,
    MissingSecretKeyError,
    ParseError,
    RegstackError,
    SecretNotFoundError,
    SecretRetrievalError,
)
from regstack.contracts.request import ConfigurationRequest
from regstack.core.config import load_request

__all__ = ["app"]

app = typer.Typer(
    name="regstack",
    help="regstack: validate container registry deployment requests against their secrets.",
    no_args_is_help=True,
)

# Hints shown under the error panel, keyed by RegstackError.kind
_ERROR_HINTS: dict[str, str] = {
    SecretNotFoundError.kind: "Create the secret in the request's namespace, or fix the secret name.",
    SecretRetrievalError.kind: "Check that the secrets path is readable and every manifest is valid YAML.",
    MissingSecretKeyError.kind: "Add the missing keys to the secret.",
    ConfigValidationError.kind: "Fix the request field named above.",
    InvalidCombinationError.kind: "Change one of the conflicting settings.",
    ParseError.kind: "Sizes look like 10Gi or 500M; durations look like 30m or 24h.",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"regstack version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """regstack: validate container registry deployment requests against their secrets."""
    from regstack.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "INFO"
    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _format_validation_error(
    title: str,
    message: str,
    hint: str | None = None,
    details: list[str] | None = None,
) -> None:
    """Display a formatted validation error with optional hint and details."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console(stderr=True)

    content = Text()
    content.append(message, style="white")

    if details:
        content.append("\n\n")
        for detail in details:
            content.append(f"  • {detail}\n", style="dim")

    if hint:
        content.append("\n")
        content.append("Hint: ", style="yellow bold")
        content.append(hint, style="yellow")

    panel = Panel(
        content,
        title=f"[red bold]❌ {title}[/]",
        border_style="red",
        padding=(0, 1),
    )
    console.print(panel)


def _load_request_or_exit(request_path: Path) -> ConfigurationRequest:
    try:
        return load_request(request_path)
    except (YamlParserError, YamlScannerError) as e:
        _format_validation_error(
            title="YAML Syntax Error",
            message=f"Failed to parse {request_path.name}",
            details=[str(e.problem)] if hasattr(e, "problem") else None,
            hint="Check for unclosed brackets, incorrect indentation, or invalid characters.",
        )
        raise typer.Exit(1) from None
    except FileNotFoundError:
        _format_validation_error(
            title="File Not Found",
            message=f"Request file does not exist: {request_path}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        details = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            details.append(f"{loc}: {error['msg']}")
        _format_validation_error(
            title="Request Schema Validation Failed",
            message=f"Invalid request in {request_path.name}",
            details=details,
            hint="Check field names, types, and required values.",
        )
        raise typer.Exit(1) from None


def _error_details(error: RegstackError) -> list[str]:
    details = [f"kind: {error.kind}"]
    if isinstance(error, SecretNotFoundError | SecretRetrievalError | MissingSecretKeyError):
        details.append(f"secret: {error.namespace}/{error.name}")
    if isinstance(error, MissingSecretKeyError):
        details.append(f"missing keys: {', '.join(error.missing_keys)}")
    if isinstance(error, ConfigValidationError) and error.entity:
        details.append(f"entity: {error.entity}")
    if isinstance(error, ParseError):
        details.append(f"literal: {error.literal!r}")
    return details


def _print_console_summary(summary: dict[str, Any]) -> None:
    from rich.console import Console
    from rich.table import Table

    console = Console()
    console.print(f"[green bold]✅ Request is valid[/] (namespace: {summary['namespace']})")

    backends = summary["registry_backends"]
    if backends:
        table = Table(title="Registry backends")
        table.add_column("Name")
        table.add_column("Kind")
        table.add_column("Credentials")
        for backend in backends:
            credentials = backend["credentials"]
            source = "-" if credentials is None else credentials["source"]
            if credentials and credentials["secret_name"]:
                source = f"{source} ({credentials['secret_name']})"
            table.add_row(backend["name"], backend["kind"], source)
        console.print(table)

    config_files = summary["config_files"]
    for entry in config_files:
        console.print(f"  config file: {entry['filename']} ({entry['type']}, {entry['size']} bytes)")


@app.command()
def validate(
    request: Path = typer.Option(
        ...,
        "--request",
        "-r",
        help="Path to the configuration request YAML file.",
    ),
    secrets: Path = typer.Option(
        ...,
        "--secrets",
        "-s",
        help="Secret manifest file, or a directory of *.yaml manifests.",
    ),
    namespace: str | None = typer.Option(
        None,
        "--namespace",
        "-n",
        help="Override the request's namespace.",
    ),
    supports_routes: bool = typer.Option(
        False,
        "--supports-routes",
        help="The target platform supports Route external access.",
    ),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
) -> None:
    """Validate a configuration request against a set of secrets."""
    from regstack.core.security.secret_store import ManifestSecretStore
    from regstack.validation import summarize
    from regstack.validation import validate as run_validation

    request_path = request.expanduser()
    config = _load_request_or_exit(request_path)

    updates: dict[str, object] = {}
    if namespace:
        updates["namespace"] = namespace
    if supports_routes:
        updates["supports_routes"] = True
    if updates:
        config = config.model_copy(update=updates)

    store = ManifestSecretStore(secrets.expanduser(), default_namespace=config.namespace)

    try:
        resolved = run_validation(config, store)
    except RegstackError as e:
        _format_validation_error(
            title="Validation Failed",
            message=str(e),
            details=_error_details(e),
            hint=_ERROR_HINTS.get(e.kind),
        )
        raise typer.Exit(1) from None

    summary = summarize(resolved)
    if output_format == "json":
        typer.echo(json.dumps(summary, indent=2))
    else:
        _print_console_summary(summary)


@app.command()
def backends() -> None:
    """List the supported registry backend kinds and what each requires."""
    from rich.console import Console
    from rich.table import Table

    from regstack.validation import VARIANTS

    table = Table(title="Registry backend kinds")
    table.add_column("Kind", no_wrap=True)
    table.add_column("Required fields")
    table.add_column("Credential keys")
    table.add_column("Optional keys")
    for kind, variant in VARIANTS.items():
        table.add_row(
            kind.value,
            ", ".join(variant.required_fields) or "-",
            ", ".join(variant.credential_keys.keys) or "-",
            ", ".join(variant.optional_projection) or "-",
        )
    Console().print(table)


if __name__ == "__main__":
    app()
