"""Doctor command for environment diagnostics."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from cli.ui_components import mask_secret
from core.config import PanelSettings, write_user_env_vars
from core.domain.errors import PanelError
from core.rules_loader import load_local_rules
from core.services.panel_client import PanelClient

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_rules(settings: PanelSettings) -> tuple[str, str]:
    if settings.rule_list_path is None:
        return "OPTIONAL", "No local rule file configured"
    load = load_local_rules(settings.rule_list_path)
    if load.warning is not None:
        return "FAIL", load.warning.reason
    return "OK", f"{len(load.rules)} rules from {settings.rule_list_path}"


def _check_panel(settings: PanelSettings) -> tuple[bool, str]:
    try:
        with PanelClient(settings) as client:
            node = client.get_node_info()
    except PanelError as exc:
        return False, str(exc)
    return True, f"port={node.port} transport={node.transport_protocol or '-'}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = PanelSettings()

    table = Table(title="sakura-panel Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("API host", "OK", settings.api_host)
    if settings.key:
        table.add_row("Key", "OK", mask_secret(settings.key))
    else:
        table.add_row("Key", "MISSING", "Set SAKURA_KEY or run `doctor setup`")
    table.add_row("Node", "OK", f"{settings.node_id} ({settings.node_type})")

    status, detail = _check_rules(settings)
    table.add_row("Local rules", status, detail)

    ok_panel, detail_panel = _check_panel(settings)
    table.add_row("Panel node_info", "OK" if ok_panel else "FAIL", detail_panel)

    _console.print(table)

    if not ok_panel:
        _console.print("\n[yellow]Note:[/yellow] check SAKURA_API_HOST / SAKURA_KEY / SAKURA_NODE_ID.")
        raise typer.Exit(code=1)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    api_host = typer.prompt("Panel API host", default="http://127.0.0.1:8000", show_default=True).strip()
    node_id = typer.prompt("Node ID", default=1, type=int, show_default=True)
    node_type = typer.prompt("Node type", default="V2ray", show_default=True).strip()
    key = typer.prompt("Panel key", hide_input=True, confirmation_prompt=False).strip()

    if not api_host or not key:
        raise typer.BadParameter("api_host and key are required")

    env_path = write_user_env_vars(
        {
            "SAKURA_API_HOST": api_host,
            "SAKURA_NODE_ID": str(node_id),
            "SAKURA_NODE_TYPE": node_type,
            "SAKURA_KEY": key,
        }
    )

    _console.print(f"[green]Saved panel config to:[/green] {env_path}")
