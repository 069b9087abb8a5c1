"""CLI entry point for remoting-swagger."""

import json
import logging
from pathlib import Path

import click
import yaml
from pydantic import ValidationError

from remoting_swagger.config import resolve_options
from remoting_swagger.errors import SpecGenerationError
from remoting_swagger.generator.document import build_swagger_document, dump_document
from remoting_swagger.generator.validator import validate_document
from remoting_swagger.parser.app import load_app, load_document

LOAD_ERRORS = (ValidationError, ValueError, yaml.YAMLError, json.JSONDecodeError)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show diagnostics (unknown types, id collisions).")
def main(verbose: bool):
    """Remoting Swagger: generate Swagger 2.0 documents from model and remote method descriptions."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("app_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the generated document.")
@click.option("--format", "fmt", default="json", type=click.Choice(["json", "yaml"]), help="Output format.")
@click.option("--base-path", default=None, help="Override basePath (defaults to the app's restApiRoot).")
@click.option("--host", default=None, help="Host serving the API, e.g. example.com:8080.")
@click.option("--protocol", default=None, type=click.Choice(["http", "https"]), help="Scheme to advertise.")
@click.option("--relation-properties/--no-relation-properties", default=None, help="Generate <Model>WithRelations variants.")
@click.option("--operation-scoped-models/--no-operation-scoped-models", default=None, help="Generate $new_<Model> variants for create operations.")
def generate(
    app_path: Path,
    output: Path,
    fmt: str,
    base_path: str | None,
    host: str | None,
    protocol: str | None,
    relation_properties: bool | None,
    operation_scoped_models: bool | None,
):
    """Generate a Swagger 2.0 document from an application description."""
    click.echo(f"Loading {app_path}...")
    try:
        app = load_app(app_path)
    except LOAD_ERRORS as e:
        raise click.ClickException(f"Invalid application description: {e}")
    click.echo(f"Found {len(app.models)} models and {len(app.routes)} custom routes.")

    options = resolve_options(
        app.swagger,
        base_path=base_path,
        host=host,
        protocol=protocol,
        generate_relation_properties=relation_properties,
        generate_operation_scoped_models=operation_scoped_models,
    )
    try:
        document = build_swagger_document(app, options)
    except SpecGenerationError as e:
        raise click.ClickException(str(e))

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(dump_document(document, fmt), encoding="utf-8")
    click.echo(
        f"Wrote {len(document['paths'])} paths and {len(document['definitions'])} definitions to {output}"
    )


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
def check(doc_path: Path):
    """Check a generated document for dangling references and duplicate operation ids."""
    try:
        document = load_document(doc_path)
    except LOAD_ERRORS as e:
        raise click.ClickException(f"Cannot read {doc_path}: {e}")

    errors = validate_document(document)
    if not errors:
        click.echo("No problems found.")
        return
    click.echo(f"Found {len(errors)} problem(s):")
    for location, message in errors.items():
        click.echo(f"  {location}: {message}")
    raise SystemExit(1)
