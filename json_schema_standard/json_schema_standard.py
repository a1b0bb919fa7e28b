import json
import logging

import click

from .pipeline import (
    AdditionalPropertiesStrategy,
    CompilerConfig,
    Dialect,
    ReferenceStrategy,
    StandardCompiler,
    StandardSchemaError,
)
from .pipeline.analyzer import topological_sort

DIALECTS = [d.value for d in Dialect]
FROM_HELP = "Dialect of INPUT when it has no $schema"


def load_config(config):
    if config is None:
        return CompilerConfig()
    with open(config) as f:
        return CompilerConfig.from_dict(json.load(f))


def load_schema(path):
    with open(path) as f:
        return json.load(f)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log pipeline decisions at DEBUG level")
def json_schema_standard(verbose):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@json_schema_standard.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--from", "-f", "source", default=None, type=click.Choice(DIALECTS), help=FROM_HELP)
@click.option("--to", "-t", "target", default=None, type=click.Choice(DIALECTS), help="Dialect of OUTPUT")
@click.option("--reference-strategy", default=None, type=click.Choice([s.value for s in ReferenceStrategy]))
@click.option(
    "--additional-properties",
    default=None,
    type=click.Choice([s.value for s in AdditionalPropertiesStrategy]),
)
@click.argument("path", default=None, type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default=None, type=click.Path(resolve_path=True))
def convert(config, source, target, reference_strategy, additional_properties, path, output):
    """Convert a JSON Schema document to another dialect."""
    config = load_config(config)

    # CLI options override the config file
    if source is not None:
        config.importer.dialect = Dialect(source)
    if target is not None:
        config.emitter.dialect = Dialect(target)
    if reference_strategy is not None:
        config.emitter.top_level_reference_strategy = ReferenceStrategy(reference_strategy)
    if additional_properties is not None:
        config.emitter.additional_properties_strategy = AdditionalPropertiesStrategy(additional_properties)

    try:
        out = StandardCompiler(config).convert(load_schema(path))
    except StandardSchemaError as e:
        raise click.ClickException(str(e)) from e

    with open(output, "w") as f:
        json.dump(out, f, indent=2)
        f.write("\n")


@json_schema_standard.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--from", "-f", "source", default=None, type=click.Choice(DIALECTS), help=FROM_HELP)
@click.option("--format", "format_code", is_flag=True, default=False, help="Format the module with black")
@click.argument("path", default=None, type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default=None, type=click.Path(resolve_path=True))
def render(config, source, format_code, path, output):
    """Render a JSON Schema document as Python builder code."""
    config = load_config(config)
    if source is not None:
        config.importer.dialect = Dialect(source)
    if format_code:
        config.renderer.formatter.enabled = True

    compiler = StandardCompiler(config)
    try:
        out = compiler.render(compiler.from_json_schema(load_schema(path)))
    except StandardSchemaError as e:
        raise click.ClickException(str(e)) from e

    with open(output, "w") as f:
        f.write(out)


@json_schema_standard.command()
@click.option("--from", "-f", "source", default=None, type=click.Choice(DIALECTS), help=FROM_HELP)
@click.argument("path", default=None, type=click.Path(exists=True, resolve_path=True))
def sort(source, path):
    """Print the definitions of a JSON Schema document in dependency order."""
    config = CompilerConfig()
    if source is not None:
        config.importer.dialect = Dialect(source)

    try:
        document = StandardCompiler(config).from_json_schema(load_schema(path))
    except StandardSchemaError as e:
        raise click.ClickException(str(e)) from e

    result = topological_sort(document.definitions)
    for entry in result.non_recursives:
        click.echo(entry.ref)
    if result.recursives:
        click.echo(f"recursive: {', '.join(result.recursives)}")
