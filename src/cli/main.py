"""CLI (Typer) para consultar y reportar al panel desde la terminal.

Por qué una CLI:
- Permite verificar una configuración de nodo sin levantar el agente completo.
- Todos los comandos pasan por `PanelClient`, igual que el agente.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from cli import doctor
from cli.ui_components import (
    build_client_info_panel,
    build_node_info_table,
    build_rules_table,
    build_users_table,
    print_banner,
)
from core.config import PanelSettings
from core.domain.errors import PanelError
from core.domain.models import DetectResult, NodeStatus
from core.services.panel_client import PanelClient

app = typer.Typer(no_args_is_help=True, help="Cliente del panel Sakura (XrayR node API).")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_state: dict[str, bool] = {"debug": False}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Logging a nivel DEBUG."),
    debug: bool = typer.Option(False, "--debug", help="Log detallado de cada petición HTTP."),
) -> None:
    level = logging.DEBUG if (verbose or debug) else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    _state["debug"] = debug


def build_client(settings: PanelSettings | None = None) -> PanelClient:
    client = PanelClient(settings or PanelSettings())
    if _state["debug"]:
        client.debug()
    if client.rule_load.warning is not None:
        warning = client.rule_load.warning
        _console.print(
            f"[yellow]Local rule list ignored ({escape(str(warning.path))}):[/yellow] {escape(warning.reason)}",
            soft_wrap=True,
        )
    return client


@contextmanager
def _panel_errors() -> Iterator[None]:
    try:
        yield
    except PanelError as exc:
        _console.print(f"[red]Panel error:[/red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1) from exc


@app.command()
def describe() -> None:
    """Muestra la sesión configurada (sin llamadas de red)."""

    print_banner(_console)
    with build_client() as client:
        _console.print(build_client_info_panel(client.describe()))


@app.command(name="node-info")
def node_info() -> None:
    """Descarga y muestra la configuración del nodo."""

    with build_client() as client, _panel_errors():
        node = client.get_node_info()
    _console.print(build_node_info_table(node))


@app.command()
def users() -> None:
    """Lista los usuarios del nodo."""

    with build_client() as client, _panel_errors():
        user_list = client.get_user_list()
    _console.print(build_users_table(user_list))
    _console.print(f"[dim]{len(user_list)} users[/dim]")


@app.command()
def rules() -> None:
    """Lista las reglas de detección (locales + panel)."""

    with build_client() as client, _panel_errors():
        rule_list = client.get_node_rule()
    _console.print(build_rules_table(rule_list))


@app.command(name="report-status")
def report_status(
    cpu: float = typer.Option(0.0, min=0, help="Uso de CPU (%)."),
    mem: float = typer.Option(0.0, min=0, help="Uso de memoria (%)."),
    disk: float = typer.Option(0.0, min=0, help="Uso de disco (%)."),
    uptime: int = typer.Option(0, min=0, help="Uptime (segundos)."),
) -> None:
    """Reporta el estado del nodo."""

    with build_client() as client, _panel_errors():
        client.report_node_status(NodeStatus(cpu=cpu, mem=mem, disk=disk, uptime=uptime))
    _console.print("[green]Node status reported.[/green]")


def _parse_hit(raw: str) -> DetectResult:
    uid, sep, rule_id = raw.partition(":")
    if not sep:
        raise typer.BadParameter(f"expected UID:RULE_ID, got {raw!r}")
    try:
        return DetectResult(uid=int(uid), rule_id=int(rule_id))
    except ValueError as exc:
        raise typer.BadParameter(f"expected integers in {raw!r}") from exc


@app.command(name="report-illegal")
def report_illegal(
    hits: list[str] = typer.Argument(..., help="Coincidencias en forma UID:RULE_ID."),
) -> None:
    """Reporta usos ilegales detectados."""

    results = [_parse_hit(raw) for raw in hits]
    with build_client() as client, _panel_errors():
        client.report_illegal(results)
    _console.print(f"[green]Reported {len(results)} illegal hits.[/green]")


def run() -> None:
    app()
