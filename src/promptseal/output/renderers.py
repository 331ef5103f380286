"""Per-operation Rich renderers for ServiceResult.

Renderers write to a StringIO-backed Console and are picked by
``result.op`` in :func:`render_result`; unknown ops get the generic
key-value renderer.  Model output and prompt text are always wrapped in
``Text`` so square brackets in them are never read as Rich markup.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from promptseal.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from promptseal.services.result import ServiceResult

_Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console)
        if verbose:
            _render_meta(console, result)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: just the value a script would pipe on."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    data = result.data
    if result.op == "seal_prompt":
        return json.dumps(data["payload"], separators=(",", ":"))
    if result.op == "generate_key":
        return str(data["key"])
    if result.op == "list_flows":
        return "\n".join(item["name"] for item in data.get("items", []))
    if result.op == "resolve_composite":
        return str(data.get("prompt", ""))
    if data.get("items") and result.op == "run_flow":
        return "\n".join(str(item) for item in data["items"])
    if "text" in data:
        return str(data["text"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "ps.ok"), (f"  {result.op}", "ps.op")))


def _field(console: Console, key: str, value: Any, *, style: str = "") -> None:
    console.print(Text.assemble((f"  {key}: ", "ps.key"), (str(value), style)))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block, telemetry as an indented span tree."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry":
            _render_span(console, value, indent=4)
        else:
            console.print(Text(f"    {key}: {value}"))


def _render_span(console: Console, span: dict[str, Any], indent: int) -> None:
    duration = span.get("duration_ms", 0.0)
    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = Text(" " * indent)
    line.append(f"{duration:>8.2f}ms", style=style)
    line.append(f"  {span.get('name', '?')}")
    annotations = span.get("annotations") or {}
    if annotations:
        line.append("  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")")
    console.print(line)

    for child in span.get("children", []):
        _render_span(console, child, indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    line = Text("ERROR", style="ps.error")
    line.append(f"  {result.op}", style="ps.op")
    if err:
        line.append(f"  [{err.code}]", style="dim")
    line.append(f"  {err.message if err else 'Unknown error'}")
    console.print(line)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for key, value in err.detail.items():
            console.print(Text(f"    {key}: {value}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            value = json.dumps(value, separators=(",", ":"))
        _field(console, key, value)


def _render_sealed(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    _field(console, "prompt", result.data.get("prompt", ""), style="ps.name")
    payload = result.data.get("payload", {})
    for key in ("iv", "ciphertext", "authTag"):
        _field(console, key, payload.get(key, ""), style="ps.hex")


def _render_completion(result: ServiceResult, console: Console) -> None:
    """Completion text in a panel; list flows add their items below."""
    _status_line(console, result)
    data = result.data
    for key in ("flow", "category"):
        if key in data:
            _field(console, key, data[key], style="ps.name")

    if data.get("empty"):
        console.print(Text("  (empty result)", style="ps.warning"))
        return

    text = str(data.get("text", "")).strip()
    if text:
        console.print(Panel(Text(text), expand=False))
    else:
        console.print(Text("  (empty completion)", style="dim"))
    items = data.get("items") or []
    if items and result.op == "run_flow":
        for item in items:
            console.print(Text(f"  - {item}"))
        console.print(f"\n{len(items)} items")


def _render_composite(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    title = str(result.data.get("composite", ""))
    console.print(Panel(Text(str(result.data.get("prompt", ""))), title=title, expand=False))


def _render_flow_table(result: ServiceResult, console: Console) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Flow", style="ps.name", no_wrap=True)
    table.add_column("Template")
    table.add_column("Required")
    table.add_column("Output")
    table.add_column("Template file")
    for item in items:
        available = item.get("available", False)
        table.add_row(
            str(item.get("name", "")),
            str(item.get("template", "")),
            ", ".join(item.get("required", [])) or "-",
            str(item.get("output", "")),
            Text("present", style="ps.present") if available else Text("missing", style="ps.missing"),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} flows")


def _render_key(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    _field(console, "key", result.data.get("key", ""))
    console.print(Text("  Store it as [crypto] key or PROMPTSEAL_CRYPTO__KEY.", style="dim"))


_OP_RENDERERS: dict[str, _Renderer] = {
    "seal_prompt": _render_sealed,
    "exec_prompt": _render_completion,
    "requirement_score": _render_completion,
    "run_flow": _render_completion,
    "random_idea": _render_completion,
    "resolve_composite": _render_composite,
    "list_flows": _render_flow_table,
    "generate_key": _render_key,
}
