"""``testatlas frameworks`` -- List the registered test frameworks.

Prints every framework definition in detection order (priority
descending, then name) with its languages and the config files it
understands.

Exit Codes:
    0 -- Always (informational command, cannot fail).
"""

from __future__ import annotations

import json

import click

from testatlas.framework import Definition
from testatlas.parsers import default_registry


def frameworks_to_json(definitions: list[Definition]) -> list[dict]:
    """Convert definitions to JSON-serializable dicts, order preserved."""
    from testatlas.cli.output import config_files

    return [
        {
            "name": d.name,
            "languages": [language.value for language in d.languages],
            "priority": d.priority,
            "configFiles": config_files(d),
            "hasConfigParser": d.config_parser is not None,
        }
        for d in definitions
    ]


@click.command("frameworks")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
def frameworks_command(output_format: str) -> None:
    """List all supported test frameworks in detection order."""
    definitions = default_registry().all()
    if output_format == "json":
        click.echo(json.dumps(frameworks_to_json(definitions), indent=2))
    else:
        from testatlas.cli.output import print_frameworks
        print_frameworks(definitions)
