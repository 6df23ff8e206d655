"""
Filestore CLI Tool

Command-line client for a running filestore API.

Usage:
    filestore put PATH NAME FILE   - Store a local file
    filestore get --id 1 -o out    - Download a file
    filestore info --id 1          - Show file metadata
    filestore rm --id 1            - Delete a file
    filestore serve                - Start the API server
"""
import mimetypes
import os
import subprocess
import sys
from pathlib import Path
from urllib.parse import unquote

import click
import httpx
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from filestore import __version__

# Load environment variables
load_dotenv()

console = Console()

# API Configuration
API_BASE = os.getenv("FILESTORE_API_URL", "http://localhost:8000")
FILES_URL = f"{API_BASE}/api/v1/files"


def build_params(file_id, path, name):
    """Turn CLI selectors into request parameters."""
    if file_id is not None:
        return {"id": str(file_id)}
    if path is not None and name is not None:
        return {"path": path, "name": name}
    raise click.UsageError("Pass --id, or both --path and --name")


def fail(response: httpx.Response):
    """Print the server's error message and exit."""
    try:
        message = response.json().get("error", response.text)
    except ValueError:
        message = response.text
    console.print(f"[red]✗ {response.status_code}: {message}[/red]")
    sys.exit(1)


def request(method: str, **kwargs) -> httpx.Response:
    """Send a request to the files endpoint, exiting on errors."""
    try:
        response = httpx.request(method, FILES_URL, timeout=60.0, **kwargs)
    except (httpx.ConnectError, httpx.TimeoutException) as e:
        console.print(f"[red]✗ Could not connect to API server at {API_BASE}: {e}[/red]")
        sys.exit(1)
    if response.is_error:
        fail(response)
    return response


def selector_options(func):
    """Shared --id / --path / --name options."""
    func = click.option("--name", default=None, help="File name")(func)
    func = click.option("--path", default=None, help="Logical path")(func)
    func = click.option("--id", "file_id", type=int, default=None, help="File id")(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="filestore")
def main():
    """
    Filestore - metadata-indexed blob store client.
    """
    pass


@main.command()
@click.argument("path")
@click.argument("name")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--type", "content_type", default=None, help="Content type (guessed if omitted)")
def put(path: str, name: str, file: Path, content_type: str | None):
    """
    Store FILE at PATH/NAME, replacing any existing file there.

    Example:
        filestore put /docs/2024 report.pdf ./report.pdf
    """
    if content_type is None:
        content_type = mimetypes.guess_type(name)[0] or "application/octet-stream"

    response = request(
        "PUT",
        params={"path": path, "name": name, "type": content_type},
        content=file.read_bytes(),
    )
    data = response.json()
    verb = "Created" if data.get("created") else "Replaced"
    console.print(f"[green]✓[/green] {verb} file [cyan]{data['id']}[/cyan]")


@main.command()
@selector_options
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write content to this file instead of stdout")
def get(file_id, path, name, output):
    """
    Download a file by id or by path and name.

    Example:
        filestore get --path /docs/2024 --name report.pdf -o report.pdf
    """
    response = request("GET", params=build_params(file_id, path, name))

    if output is None:
        sys.stdout.buffer.write(response.content)
        sys.stdout.buffer.flush()
        return

    output.write_bytes(response.content)
    console.print(f"[green]✓[/green] Saved {len(response.content)} bytes to [cyan]{output}[/cyan]")


@main.command()
@selector_options
def info(file_id, path, name):
    """
    Show metadata for a file.
    """
    response = request("GET", params=build_params(file_id, path, name))
    headers = response.headers

    table = Table(title="File")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("id", headers.get("x-file-id", ""))
    table.add_row("path", unquote(headers.get("x-file-path", "")))
    table.add_row("name", unquote(headers.get("x-file-name", "")))
    table.add_row("type", headers.get("content-type", ""))
    table.add_row("size", headers.get("x-file-size", ""))
    console.print(table)


@main.command()
@selector_options
def rm(file_id, path, name):
    """
    Delete a file by id or by path and name.
    """
    response = request("DELETE", params=build_params(file_id, path, name))
    data = response.json()

    console.print(f"[green]✓[/green] Deleted {data['path']}/{data['name']}")
    for warning in data.get("warnings", []):
        console.print(f"[yellow]⚠ {warning}[/yellow]")


@main.command()
@click.option("--port", default=8000, help="Port to listen on")
@click.option("--host", default="127.0.0.1", help="Interface to bind")
def serve(port: int, host: str):
    """
    Start the filestore API server.
    """
    console.print(f"[cyan]Starting filestore on {host}:{port}[/cyan]")
    cmd = [sys.executable, "-m", "uvicorn", "filestore.main:app", f"--host={host}", f"--port={port}"]
    subprocess.run(cmd)


if __name__ == "__main__":
    main()
