"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from coterie.output.console import create_console, get_output, style_for_class

if TYPE_CHECKING:
    from rich.console import Console

    from coterie.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    # For list results, return IDs only
    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(
            str(item["id"]) for item in items if isinstance(item, dict) and "id" in item
        )
    if "id" in result.data:
        return str(result.data["id"])

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="coterie.ok")
    op = Text(f"  {result.op}", style="coterie.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="coterie.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="coterie.id")
    elif key == "name" or key.endswith("_name"):
        v = Text(str(value), style="coterie.name")
    elif key == "class":
        v = Text(str(value), style=style_for_class(str(value)))
    elif isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v, sep="", end="")
    console.print()


def _position(item: dict[str, Any]) -> str:
    pos = item.get("position")
    if not pos:
        return "-"
    return f"{pos['x']:.0f},{pos['y']:.0f}"


def _warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text(f"  warning: {warning}", style="coterie.warning"))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="coterie.error")
    op = Text(f"  {result.op}", style="coterie.op")
    code = Text(f" [{err.code}]" if err else "", style="dim")
    sep = Text(" — ")
    console.print(label, op, code, sep, Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Object renderers ──────────────────────────────────────────────────


def _render_object(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create/rename/move/assign results for one object."""
    _status_line(console, result)
    d = result.data
    for key in ("id", "name", "class", "primary_type"):
        if d.get(key) is not None:
            _field(console, key, d[key])
    if d.get("types"):
        _field(console, "types", ", ".join(d["types"]))
    if "position" in d:
        _field(console, "position", _position(d))
    if verbose and d.get("data"):
        _field(console, "data", d["data"])


def _render_object_panel(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render show_object as a panel with relationships."""
    d = result.data
    lines: list[str] = [f"id: {d['id']}", f"class: {d['class']}"]
    if d.get("types"):
        lines.append(f"types: {', '.join(d['types'])} (primary: {d.get('primary_type')})")
    lines.append(f"position: {_position(d)}")
    for key, value in (d.get("data") or {}).items():
        lines.append(f"{key}: {value}")

    related = d.get("related", [])
    if related:
        lines.append("")
        for rel in related:
            arrow = "->" if rel["direction"] == "outgoing" else "<-"
            lines.append(f"{arrow} {rel['type']} {rel['name']} ({rel['class']})")
    if verbose and d.get("neighborhood"):
        lines.append("")
        lines.append(f"neighborhood: {len(d['neighborhood'])} objects")

    style = style_for_class(str(d.get("class", "")))
    panel = Panel(
        Text("\n".join(lines)),
        title=d.get("name", "?"),
        border_style=style or "dim",
        expand=False,
    )
    console.print(panel)


def _render_object_table(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="coterie.id", no_wrap=True)
    table.add_column("Name", style="coterie.name")
    table.add_column("Class")
    table.add_column("Types")
    table.add_column("Position", justify="right")
    if verbose:
        table.add_column("Updated", style="dim")
    for item in items:
        row = [
            str(item["id"]),
            str(item["name"]),
            Text(str(item["class"]), style=style_for_class(str(item["class"]))),
            ", ".join(item.get("types", [])),
            _position(item),
        ]
        if verbose:
            row.append(str(item.get("updated_at") or ""))
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} objects")


def _render_deleted(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── Relationship renderers ────────────────────────────────────────────


def _render_relationship(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "id", d["id"])
    console.print(Text(f"  {d.get('source_name')} -[{d['type']}]-> {d.get('target_name')}"))
    if verbose and d.get("data"):
        _field(console, "data", d["data"])


def _render_relationship_table(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="coterie.id", no_wrap=True)
    table.add_column("Source", style="coterie.name")
    table.add_column("Type")
    table.add_column("Target", style="coterie.name")
    for item in items:
        table.add_row(
            str(item["id"]),
            str(item.get("source_name") or item["source_id"]),
            str(item["type"]),
            str(item.get("target_name") or item["target_id"]),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} relationships")


# ── Taxonomy ──────────────────────────────────────────────────────────


def _render_taxonomy(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    for cls in result.data.get("classes", []):
        console.print(Text(cls["display_name"], style=style_for_class(cls["id"]) or "bold"))
        for t in cls["types"]:
            console.print(f"  {t['id']:<20} {t['display_name']}")
    console.print()
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Relationship")
    table.add_column("Source")
    table.add_column("Target")
    for rt in result.data.get("relationship_types", []):
        table.add_row(rt["id"], ", ".join(rt["source"]) or "any", ", ".join(rt["target"]) or "any")
    console.print(table)


# ── Layout / match / import ───────────────────────────────────────────


def _render_layout(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "placed", d["placed"])
    _field(console, "failed", d["failed"])
    if d.get("dry_run"):
        _field(console, "dry_run", True)
    for failure in d.get("failures", []):
        console.print(
            Text("  failed", style="coterie.error"),
            Text(f"{failure['object_id']}: {failure['reason']}"),
        )
    if verbose:
        for pos in d.get("positions", []):
            console.print(f"    {pos['object_id']}  {pos['x']:.0f},{pos['y']:.0f}")


def _render_match(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    best = d.get("best")
    if best:
        console.print(
            Text("match", style="coterie.ok"),
            Text(f"  {best['name']}", style="coterie.name"),
            Text(f"  {best['score']:.4f}", style="coterie.score"),
        )
    else:
        console.print(Text("no match", style="coterie.warning"), Text(f"  for '{d['query']}'"))
    candidates = d.get("candidates", [])
    if candidates and (verbose or len(candidates) > 1):
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("ID", style="coterie.id", no_wrap=True)
        table.add_column("Name", style="coterie.name")
        table.add_column("Score", style="coterie.score", justify="right")
        for c in candidates:
            table.add_row(str(c["id"]), str(c["name"]), f"{c['score']:.4f}")
        console.print(table)


def _render_import(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, list) and not verbose:
            _field(console, key, len(value))
        else:
            _field(console, key, value)
    _warnings(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose and result.meta:
        for key, value in result.meta.items():
            console.print(f"    {key}: {value}")


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Objects
    "create_object": _render_object,
    "rename_object": _render_object,
    "move_object": _render_object,
    "update_data": _render_object,
    "assign_type": _render_object,
    "remove_type": _render_object,
    "show_object": _render_object_panel,
    "list_objects": _render_object_table,
    "delete_object": _render_deleted,
    # Relationships
    "create_relationship": _render_relationship,
    "list_relationships": _render_relationship_table,
    "delete_relationship": _render_deleted,
    # Taxonomy
    "taxonomy": _render_taxonomy,
    # Layout, matching, import
    "auto_layout": _render_layout,
    "match": _render_match,
    "import_contacts": _render_import,
    "import_landscape": _render_import,
}
