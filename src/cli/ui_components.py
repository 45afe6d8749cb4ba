"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import ClientInfo, DetectRule, NodeInfo, UserInfo


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("sakura-panel", style="bold magenta")
    subtitle = Text("Node info • Users • Rules • Telemetry", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="magenta", padding=(1, 4)))


def mask_secret(secret: str) -> str:
    if len(secret) <= 4:
        return "*" * len(secret)
    return secret[:2] + "*" * (len(secret) - 4) + secret[-2:]


def build_client_info_panel(info: ClientInfo) -> Panel:
    body = Text()
    body.append("API host: ", style="bold")
    body.append(f"{info.api_host}\n")
    body.append("Node: ", style="bold")
    body.append(f"{info.node_id} ({info.node_type})\n")
    body.append("Key: ", style="bold")
    body.append(mask_secret(info.key), style="dim")
    return Panel(body, title="Session", border_style="cyan")


def build_node_info_table(node: NodeInfo) -> Table:
    table = Table(title=f"Node {node.node_id} ({node.node_type})")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for name, value in node.model_dump().items():
        if name in ("node_id", "node_type"):
            continue
        table.add_row(name, "" if value is None else str(value))
    return table


def build_users_table(users: Iterable[UserInfo]) -> Table:
    table = Table(title="Users")
    table.add_column("UID", style="cyan", no_wrap=True)
    table.add_column("UUID", style="white")
    table.add_column("AlterID", style="green")
    table.add_column("Speed (B/s)", style="magenta")
    table.add_column("Devices", style="yellow")
    for user in users:
        table.add_row(
            str(user.uid),
            user.uuid,
            str(user.alter_id),
            str(user.speed_limit),
            str(user.device_limit),
        )
    return table


def build_rules_table(rules: Iterable[DetectRule]) -> Table:
    table = Table(title="Detect rules")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Source", style="dim")
    table.add_column("Pattern", style="white")
    for rule in rules:
        source = "local" if rule.id == -1 else "panel"
        table.add_row(str(rule.id), source, rule.pattern)
    return table
