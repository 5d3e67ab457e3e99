"""Command-line interface for interacting with Unity arrays."""
from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping, Sequence
from typing import Any

import typer

try:  # pragma: no cover - exercised in runtime environments
    from rich import box
    from rich.console import Console
    from rich.table import Table
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError(
        "The CLI requires Rich for table rendering. Install the CLI extras via "
        "'pip install unity-client[cli]' to enable this command."
    ) from exc

from . import UnityClient
from .cli_schema import CLI_TABLE_VIEWS, TableView
from .config import ENV_ENDPOINT, ENV_INSECURE, ENV_PASSWORD, ENV_USERNAME, ConnectConfig
from .exceptions import RequestError, UnityError

app = typer.Typer(help="Unity storage management CLI.", no_args_is_help=True)

system_app = typer.Typer(help="System metadata operations.")
snapshots_app = typer.Typer(help="Snapshot operations.")
volumes_app = typer.Typer(help="Volume operations.")
filesystems_app = typer.Typer(help="Filesystem operations.")
app.add_typer(system_app, name="system")
app.add_typer(snapshots_app, name="snapshots")
app.add_typer(volumes_app, name="volumes")
app.add_typer(filesystems_app, name="filesystems")


def _build_client(
    endpoint: str,
    username: str | None,
    password: str | None,
    insecure: bool,
    timeout: float,
    *,
    login: bool = True,
) -> UnityClient:
    client = UnityClient(endpoint, insecure=insecure, timeout=timeout)
    if login:
        if not username or not password:
            client.close()
            raise typer.BadParameter("--username and --password are required.")
        try:
            client.authenticate(
                ConnectConfig(
                    endpoint=endpoint,
                    username=username,
                    password=password,
                    insecure=insecure,
                )
            )
        except UnityError as exc:
            client.close()
            _handle_error(exc)
    return client


def _as_row(item: Any) -> Any:
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        row = dataclasses.asdict(item)
        row.pop("raw", None)
        return row
    return item


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


console = Console(force_terminal=False, color_system=None)


def _render_rich_table(view: TableView, rows: Sequence[Mapping[str, Any]]) -> None:
    table = Table(
        title=view.title,
        box=box.SIMPLE,
        show_lines=False,
        header_style="bold cyan",
    )
    for column in view.columns:
        table.add_column(column.header, justify=column.justify)
    ordered_rows = list(rows)
    if view.sort_key:
        ordered_rows.sort(key=view.sort_key)
    for row in ordered_rows:
        table.add_row(*(column.render(row) for column in view.columns))
    console.print(table)


def _present_output(payload: Any, *, view_id: str | None, json_output: bool) -> None:
    if isinstance(payload, Sequence) and not isinstance(payload, (str, bytes)):
        payload = [_as_row(item) for item in payload]
    else:
        payload = _as_row(payload)
    if json_output or view_id is None:
        _echo_json(payload)
        return
    view = CLI_TABLE_VIEWS.get(view_id)
    if not view or not isinstance(payload, list):
        _echo_json(payload)
        return
    rows = [item for item in payload if isinstance(item, Mapping)]
    if not rows:
        _echo_json(payload)
        return
    _render_rich_table(view, rows)


def _handle_error(exc: UnityError) -> None:
    if isinstance(exc, RequestError):
        message = f"Request failed (status {exc.status_code}): {exc}"
        if exc.details:
            message += f"\nDetails: {exc.details}"
    else:
        message = str(exc)
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _shared_options() -> dict[str, Any]:  # pragma: no cover - helper indirection
    return {
        "endpoint": typer.Option(
            ..., "--endpoint", envvar=ENV_ENDPOINT, help="Unity management address."
        ),
        "username": typer.Option(
            None,
            "--username",
            "-u",
            envvar=ENV_USERNAME,
            help="Array username.",
        ),
        "password": typer.Option(
            None,
            "--password",
            "-p",
            envvar=ENV_PASSWORD,
            help="Array password.",
            hide_input=True,
        ),
        "insecure": typer.Option(
            False,
            "--insecure/--secure",
            envvar=ENV_INSECURE,
            help="Skip TLS certificate verification.",
            show_default=True,
        ),
        "timeout": typer.Option(30.0, help="Request timeout (seconds).", show_default=True),
        "output_json": typer.Option(
            False,
            "--json",
            "-j",
            help="Return raw JSON instead of rendering a table.",
        ),
    }


_SHARED_OPTIONS = _shared_options()


@system_app.command("info")
def system_info(
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    insecure: bool = _SHARED_OPTIONS["insecure"],
    timeout: float = _SHARED_OPTIONS["timeout"],
) -> None:
    """Display the array model and software version (no login required)."""

    with _build_client(endpoint, None, None, insecure, timeout, login=False) as client:
        try:
            info = client.basic_system_info()
        except UnityError as exc:
            _handle_error(exc)
            return
    _echo_json(_as_row(info))


@snapshots_app.command("list")
def snapshots_list(
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    insecure: bool = _SHARED_OPTIONS["insecure"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
    source_id: str = typer.Option("", "--source-id", help="Only snapshots of this storage resource."),
    page: int = typer.Option(0, "--page", help="Page number when --max-entries is set."),
    max_entries: int = typer.Option(0, "--max-entries", help="Page size (0 lists everything)."),
) -> None:
    """List snapshots."""

    with _build_client(endpoint, username, password, insecure, timeout) as client:
        try:
            snapshots, next_token = client.snapshots.list(page, max_entries, source_id)
        except UnityError as exc:
            _handle_error(exc)
            return
    _present_output(snapshots, view_id="snapshots.list", json_output=output_json)
    if next_token and not output_json:
        typer.echo(f"More snapshots available; rerun with --page {next_token}.")


@snapshots_app.command("get")
def snapshots_get(
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    insecure: bool = _SHARED_OPTIONS["insecure"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    snapshot_id: str | None = typer.Option(None, "--id", help="Snapshot identifier."),
    name: str | None = typer.Option(None, "--name", help="Snapshot name."),
) -> None:
    """Show one snapshot by ID or name."""

    if bool(snapshot_id) == bool(name):
        raise typer.BadParameter("Provide exactly one of --id or --name.")
    with _build_client(endpoint, username, password, insecure, timeout) as client:
        try:
            if snapshot_id:
                snapshot = client.snapshots.find_by_id(snapshot_id)
            else:
                snapshot = client.snapshots.find_by_name(name or "")
        except UnityError as exc:
            _handle_error(exc)
            return
    _echo_json(_as_row(snapshot))


@snapshots_app.command("create")
def snapshots_create(
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    insecure: bool = _SHARED_OPTIONS["insecure"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    resource_id: str = typer.Option(..., "--resource-id", help="Storage resource to snapshot."),
    name: str = typer.Option(..., "--name", help="Snapshot name."),
    description: str = typer.Option("", "--description", help="Snapshot description."),
    retention: str = typer.Option(
        "",
        "--retention",
        help="Retention window as days:hours:minutes:seconds.",
    ),
) -> None:
    """Create a snapshot of a volume or filesystem."""

    with _build_client(endpoint, username, password, insecure, timeout) as client:
        try:
            snapshot = client.snapshots.create(resource_id, name, description, retention)
        except UnityError as exc:
            _handle_error(exc)
            return
    _echo_json(_as_row(snapshot))


@snapshots_app.command("delete")
def snapshots_delete(
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    insecure: bool = _SHARED_OPTIONS["insecure"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    snapshot_id: str = typer.Option(..., "--id", help="Snapshot identifier."),
) -> None:
    """Delete a snapshot."""

    with _build_client(endpoint, username, password, insecure, timeout) as client:
        try:
            client.snapshots.delete(snapshot_id)
        except UnityError as exc:
            _handle_error(exc)
            return
    typer.secho(f"Snapshot {snapshot_id} deleted.", fg=typer.colors.GREEN)


@volumes_app.command("list")
def volumes_list(
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    insecure: bool = _SHARED_OPTIONS["insecure"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
) -> None:
    """List volumes present on the array."""

    with _build_client(endpoint, username, password, insecure, timeout) as client:
        try:
            volumes, _ = client.volumes.list()
        except UnityError as exc:
            _handle_error(exc)
            return
    _present_output(volumes, view_id="volumes.list", json_output=output_json)


@volumes_app.command("get")
def volumes_get(
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    insecure: bool = _SHARED_OPTIONS["insecure"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    volume_id: str | None = typer.Option(None, "--id", help="Volume identifier."),
    name: str | None = typer.Option(None, "--name", help="Volume name."),
) -> None:
    """Show one volume by ID or name."""

    if bool(volume_id) == bool(name):
        raise typer.BadParameter("Provide exactly one of --id or --name.")
    with _build_client(endpoint, username, password, insecure, timeout) as client:
        try:
            if volume_id:
                volume = client.volumes.find_by_id(volume_id)
            else:
                volume = client.volumes.find_by_name(name or "")
        except UnityError as exc:
            _handle_error(exc)
            return
    _echo_json(_as_row(volume))


@filesystems_app.command("list")
def filesystems_list(
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    insecure: bool = _SHARED_OPTIONS["insecure"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
) -> None:
    """List filesystems present on the array."""

    with _build_client(endpoint, username, password, insecure, timeout) as client:
        try:
            filesystems, _ = client.filesystems.list()
        except UnityError as exc:
            _handle_error(exc)
            return
    _present_output(filesystems, view_id="filesystems.list", json_output=output_json)


@filesystems_app.command("get")
def filesystems_get(
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    insecure: bool = _SHARED_OPTIONS["insecure"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    filesystem_id: str | None = typer.Option(None, "--id", help="Filesystem identifier."),
    name: str | None = typer.Option(None, "--name", help="Filesystem name."),
) -> None:
    """Show one filesystem by ID or name."""

    if bool(filesystem_id) == bool(name):
        raise typer.BadParameter("Provide exactly one of --id or --name.")
    with _build_client(endpoint, username, password, insecure, timeout) as client:
        try:
            if filesystem_id:
                filesystem = client.filesystems.find_by_id(filesystem_id)
            else:
                filesystem = client.filesystems.find_by_name(name or "")
        except UnityError as exc:
            _handle_error(exc)
            return
    _echo_json(_as_row(filesystem))
