from pathlib import Path
from typing import List, Optional

import click
import typer
import uvicorn
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from url_shortener.core.config_mgr import ENV_CONFIG_PATH, parse_redirect_option
from url_shortener.core.exceptions import ConfigError
from url_shortener.core.models import ServerConfig
from url_shortener.main import create_app
from url_shortener.redirect.loader import load_redirects

app = typer.Typer(help="URL Shortener CLI")
console = Console()


def _config_path_from_ctx() -> Optional[Path]:
    ctx = click.get_current_context()
    return (ctx.obj or {}).get("config_path")


def _load_or_exit(config_path: Optional[Path]):
    try:
        return load_redirects(config_path)
    except ConfigError as exc:
        console.print(f"[red]Config invalid: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1)


@app.callback()
def _main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Redirects file path (default: env URLSHORT_CONFIG_PATH or ./redirects.yaml)",
        envvar=ENV_CONFIG_PATH,
    ),
):
    ctx.obj = {"config_path": config}


@app.command()
def start(
    host: Optional[str] = None,
    port: Optional[int] = None,
    redirect: Optional[List[str]] = typer.Option(
        None, "--redirect", help="Extra in-memory redirect as PATH=URL, repeatable"
    ),
):
    """Start redirect server."""
    config_path = _config_path_from_ctx()
    try:
        redirects = dict(parse_redirect_option(item) for item in redirect or [])
        asgi_app = create_app(config_path, redirects=redirects)
    except ConfigError as exc:
        console.print(f"[red]Config invalid: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    defaults = ServerConfig()
    uvicorn.run(asgi_app, host=host or defaults.host, port=port or defaults.port)


@app.command("ls")
def list_redirects():
    """List configured redirects."""
    table_data = _load_or_exit(_config_path_from_ctx())
    table = Table(title="Redirects")
    table.add_column("Path")
    table.add_column("URL", overflow="fold")

    for path, url in table_data.items():
        table.add_row(path, url)
    console.print(table)


@app.command()
def resolve(path: str):
    """Show where a path redirects to."""
    table_data = _load_or_exit(_config_path_from_ctx())
    target = table_data.get(path)
    if target is None:
        console.print(f"[red]No redirect for {escape(path)}[/red]")
        raise typer.Exit(code=1)
    console.print(target, markup=False, highlight=False, soft_wrap=True)


@app.command()
def validate():
    """Validate redirects file."""
    table_data = _load_or_exit(_config_path_from_ctx())
    console.print(f"[green]Config is valid ({len(table_data)} redirects)[/green]")


def main():
    app()


if __name__ == "__main__":
    main()
