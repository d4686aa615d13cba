"""CLI entrypoint: Typer app definition and command registration"""

import typer

from storysync.cli.commands import list_cmd, show_cmd, sync_cmd


app = typer.Typer(name="storysync", no_args_is_help=True, help="Keep story metadata and blueprint references in sync")

app.command(name="sync")(sync_cmd)
app.command(name="list")(list_cmd)
app.command(name="show")(show_cmd)
