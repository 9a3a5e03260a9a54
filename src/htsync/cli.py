"""Root Typer application for the htsync CLI."""

from __future__ import annotations

import logging

import typer

from htsync.commands import serve, users

app = typer.Typer(
    name="htsync",
    help="Keep NGINX htpasswd files in sync with the user directory.",
    no_args_is_help=True,
)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


app.command(name="sync-all")(users.sync_all)
app.command(name="add")(users.add)
app.command(name="remove")(users.remove)
app.command(name="reset")(users.reset)
app.command(name="passwd")(users.passwd)
app.command(name="list")(users.list_users)
app.command(name="status")(users.status)
app.command(name="serve")(serve.serve)

if __name__ == "__main__":
    app()
