"""Schema describing important fields for CLI table rendering."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

Row = Mapping[str, Any]
ValueExtractor = Callable[[Row], Any]
ValueFormatter = Callable[[Any], str]
SortKey = Callable[[Row], Any]


@dataclass(frozen=True)
class Column:
    """Describe how to pull and format a column for Rich tables."""

    header: str
    keys: tuple[str, ...] = ()
    extractor: ValueExtractor | None = None
    formatter: ValueFormatter | None = None
    justify: str = "left"

    def render(self, row: Row) -> str:
        value: Any | None = None
        if self.keys:
            for key in self.keys:
                if key in row:
                    value = row.get(key)
                    if value is not None:
                        break
        if value is None and self.extractor:
            value = self.extractor(row)
        if value is None:
            return ""
        if self.formatter:
            formatted = self.formatter(value)
            return "" if formatted is None else str(formatted)
        return str(value)


@dataclass(frozen=True)
class TableView:
    """Describe a Rich table for a CLI command."""

    title: str
    columns: tuple[Column, ...]
    sort_key: SortKey | None = None


def _bytes_formatter(*, precision: int = 2) -> ValueFormatter:
    def _formatter(value: Any) -> str:
        if not isinstance(value, (int, float)):
            return ""
        return f"{value / (1024**3):.{precision}f}"

    return _formatter


def _bool_formatter(value: Any) -> str:
    if value is None:
        return ""
    return "Yes" if bool(value) else "No"


def _sort_name(row: Row) -> str:
    return str(row.get("name") or "").lower()


CLI_TABLE_VIEWS: dict[str, TableView] = {
    "snapshots.list": TableView(
        title="Snapshots",
        columns=(
            Column("Name", keys=("name",)),
            Column("ID", keys=("id",)),
            Column("Source", keys=("storage_resource_id",)),
            Column("Created", keys=("creation_time",)),
            Column("Expires", keys=("expiration_time",)),
            Column(
                "Auto Delete",
                keys=("is_auto_delete",),
                formatter=_bool_formatter,
                justify="center",
            ),
        ),
        sort_key=_sort_name,
    ),
    "volumes.list": TableView(
        title="Volumes",
        columns=(
            Column("Name", keys=("name",)),
            Column("ID", keys=("id",)),
            Column("Pool", keys=("pool_id",)),
            Column(
                "Size (GiB)",
                keys=("size_total",),
                formatter=_bytes_formatter(precision=2),
                justify="right",
            ),
            Column("Thin", keys=("is_thin_enabled",), formatter=_bool_formatter, justify="center"),
            Column("WWN", keys=("wwn",)),
        ),
        sort_key=_sort_name,
    ),
    "filesystems.list": TableView(
        title="Filesystems",
        columns=(
            Column("Name", keys=("name",)),
            Column("ID", keys=("id",)),
            Column("NAS Server", keys=("nas_server_id",)),
            Column(
                "Size (GiB)",
                keys=("size_total",),
                formatter=_bytes_formatter(precision=2),
                justify="right",
            ),
            Column("Thin", keys=("is_thin_enabled",), formatter=_bool_formatter, justify="center"),
            Column("Storage Resource", keys=("storage_resource_id",)),
        ),
        sort_key=_sort_name,
    ),
}
