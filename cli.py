# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""FilterBox CLI - render pipe-filter templates from the command line"""

import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
import yaml

from filterbox import __version__
from filterbox.core.context import RenderContext
from filterbox.core.exceptions import FilterBoxError
from filterbox.core.logger import configure_logging
from filterbox.core.registry import get_registry
from filterbox.core.template import RenderParameters, Template

logger = logging.getLogger("filterbox.cli")


def import_source(path: str) -> Any:
    """Import a provider source given as `package.module` or `package.module:attr`"""
    module_path, _, attr = path.partition(":")
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise click.BadParameter(f"Cannot import module '{module_path}': {e}")

    if not attr:
        return module
    try:
        return getattr(module, attr)
    except AttributeError:
        raise click.BadParameter(f"Module '{module_path}' has no attribute '{attr}'")


def parse_variables(assignments: Tuple[str, ...], vars_file: Optional[str] = None) -> Dict[str, Any]:
    """Merge a YAML variables file with key=value assignments (values parsed as YAML)"""
    variables: Dict[str, Any] = {}
    if vars_file:
        try:
            with open(vars_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise click.BadParameter(f"{vars_file} is not valid YAML: {e}", param_hint="--vars-file")
        if not isinstance(data, dict):
            raise click.BadParameter(f"{vars_file} must contain a mapping", param_hint="--vars-file")
        variables.update(data)

    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"Expected key=value, got '{assignment}'", param_hint="--var")
        try:
            variables[key.strip()] = yaml.safe_load(value) if value else ""
        except yaml.YAMLError as e:
            raise click.BadParameter(f"Value of '{key.strip()}' is not valid YAML: {e}", param_hint="--var")
    return variables


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR or CRITICAL")
def cli(log_level: str):
    """FilterBox - pipe-style template filters.

    Examples:
        filterbox render "{{ name | upcase }}" --var name=world
        filterbox filters --filters mypkg.filters:MoneyFilter
    """
    configure_logging(level=log_level)


@cli.command()
@click.argument("template", required=False)
@click.option("--file", "-f", "template_file", type=click.Path(exists=True, dir_okay=False), help="Read template from file")
@click.option("--var", "-v", "assignments", multiple=True, help="Variable as key=value (value parsed as YAML)")
@click.option("--vars-file", type=click.Path(exists=True, dir_okay=False), help="YAML file with variables")
@click.option("--filters", "override_sources", multiple=True, help="Render-only filter source (module:attr)")
@click.option("--global-filters", "global_sources", multiple=True, help="Globally registered filter source (module:attr)")
@click.option("--strict/--lax", "strict", default=None, help="Error mode (default from config)")
def render(template, template_file, assignments, vars_file, override_sources, global_sources, strict):
    """Render a template and print the result.

    Examples:
        filterbox render "{{ 1000 | plus: 5 }}"
        filterbox render -f page.txt --vars-file vars.yaml --lax
    """
    if template_file:
        template = Path(template_file).read_text(encoding="utf-8")
    elif template is None:
        raise click.UsageError("Provide a TEMPLATE argument or --file")

    variables = parse_variables(assignments, vars_file)

    try:
        for source in global_sources:
            Template.register_filter(import_source(source))

        parameters = RenderParameters(
            filters=[import_source(source) for source in override_sources],
            error_mode=None if strict is None else ("strict" if strict else "lax"),
        )
        parsed = Template.parse(template)
        output = parsed.render(variables, parameters)
    except FilterBoxError as e:
        logger.debug(f"Render failed: {e.to_dict()}")
        click.echo(f"[-] Error: {e}", err=True)
        sys.exit(1)

    click.echo(output)
    for error in parsed.errors:
        click.echo(f"[!] {error.__class__.__name__}: {error.message}", err=True)


@cli.command("filters")
@click.option("--filters", "override_sources", multiple=True, help="Extra filter source (module:attr)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_filters(override_sources, as_json):
    """List visible filters and the argument counts they accept."""
    try:
        context = RenderContext(
            registry=get_registry(),
            overrides=[import_source(source) for source in override_sources],
        )
    except FilterBoxError as e:
        click.echo(f"[-] Error: {e}", err=True)
        sys.exit(1)

    listing = {}
    for name in context.filters.names():
        overloads = context.filters.lookup(name) or ()
        listing[name] = [definition.to_dict() for definition in overloads]

    if as_json:
        click.echo(json.dumps(listing, indent=2, default=str))
        return

    for name, overloads in listing.items():
        counts = []
        for overload in overloads:
            total = len(overload["parameters"])
            required = sum(1 for p in overload["parameters"] if "default" not in p)
            counts.append(str(total) if total == required else f"{required}-{total}")
        click.echo(f"{name:<20} args: {', '.join(counts)}")


if __name__ == "__main__":
    cli()
