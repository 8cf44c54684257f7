"""CLI interface for scim-diff using Click."""

import json
import logging
import sys
from typing import Any, Optional, Tuple

import click

from . import __version__
from .attribute_path import ParseError
from .descriptors import get_resource_descriptor
from .diff import generate_diff
from .resources import InvalidResourceError, ScimResource
from .schemas import RESOURCE_TYPES

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _colorize(text: str, color: str) -> str:
    """Colorize text using ANSI codes when stderr is a terminal."""
    colors = {
        "red": "\033[91m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "reset": "\033[0m",
    }
    if not sys.stderr.isatty():
        return text
    return f"{colors.get(color, '')}{text}{colors['reset']}"


def _print_error(message: str, path: str = ""):
    loc = f" at {path}" if path else ""
    click.echo(_colorize(f"❌ {message}{loc}", "red"), err=True)


def _print_success(message: str):
    click.echo(_colorize(f"✅ {message}", "green"), err=True)


def _load_json(path: str) -> Any:
    with click.open_file(path, "r") as f:
        return json.load(f)


def _load_resources(
    source: str, target: str, resource_type: Optional[str]
) -> Tuple[ScimResource, ScimResource]:
    descriptor = get_resource_descriptor(resource_type) if resource_type else None
    source_resource = ScimResource.from_json(_load_json(source), descriptor)
    target_resource = ScimResource.from_json(_load_json(target), descriptor)
    return source_resource, target_resource


@click.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, allow_dash=True))
@click.argument("target", type=click.Path(exists=True, dir_okay=False, allow_dash=True))
@click.option(
    "-a", "--attribute", "attributes", multiple=True, metavar="PATH",
    help="Compare only this attribute (e.g. name.givenName). Repeatable.",
)
@click.option(
    "--resource-type", envvar="SCIM_DIFF_RESOURCE_TYPE",
    type=click.Choice(sorted(RESOURCE_TYPES), case_sensitive=False),
    help="Read both files as this resource type instead of detecting it from 'schemas'.",
)
@click.option("--diff", "show_diff", is_flag=True, help="Print deletions and updates instead of the PATCH body")
@click.option(
    "--log-level", envvar="SCIM_DIFF_LOG_LEVEL", default="WARNING", show_default=True,
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
)
@click.version_option(version=__version__)
def main(source: str, target: str, attributes: Tuple[str, ...], resource_type: Optional[str],
         show_diff: bool, log_level: str):
    """Print the SCIM PATCH body that turns SOURCE into TARGET.

    SOURCE and TARGET are SCIM resource JSON files; use - to read one of them
    from stdin.

    Examples:

    \b
      scim-diff before.json after.json
      scim-diff before.json after.json -a name.givenName -a emails
      curl -s .../Users/123 | scim-diff - desired.json
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if source == "-" and target == "-":
        _print_error("Only one of SOURCE and TARGET can be read from stdin")
        sys.exit(1)

    try:
        source_resource, target_resource = _load_resources(source, target, resource_type)
        diff = generate_diff(source_resource, target_resource, *attributes)
        if diff.is_empty:
            _print_success("No differences")
            sys.exit(0)
        output = diff.to_json() if show_diff else diff.to_partial_resource().to_json()
    except json.JSONDecodeError as e:
        _print_error(f"Invalid JSON: {e}")
        sys.exit(1)
    except ParseError as e:
        _print_error(str(e))
        sys.exit(1)
    except InvalidResourceError as e:
        _print_error(f"Invalid resource: {e}")
        sys.exit(1)
    except (OSError, ValueError) as e:
        _print_error(f"Error: {e}")
        sys.exit(1)

    click.echo(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
