"""CLI entrypoint: Typer app definition and command registration"""

import logging
from typing import Annotated

import typer

from blogpub.cli.commands import (
    delete_cmd, init_cmd, list_cmd, reconcile_cmd, render_cmd, save_cmd, show_cmd,
)


app = typer.Typer(name="blogpub", no_args_is_help=True, help="Block-document blog authoring backend")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log INFO messages to stderr")] = False,
    ):
    """Configure logging before any command runs; log_level from config applies otherwise."""
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    if verbose:
        logging.getLogger("blogpub").setLevel(logging.INFO)


app.command(name="init")(init_cmd)
app.command(name="list")(list_cmd)
app.command(name="show")(show_cmd)
app.command(name="save")(save_cmd)
app.command(name="delete")(delete_cmd)
app.command(name="render")(render_cmd)
app.command(name="reconcile")(reconcile_cmd)
