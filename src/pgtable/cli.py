"""
Command-line interface for pgtable.
"""

import asyncio
import logging
import logging.handlers
import sys
from functools import wraps
from pathlib import Path
from typing import List

import click
import yaml
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import ColumnSpec, LoggingConfig, PgTableConfig, TableSpec
from .database.connection import ConnectionConfig, ConnectionPool
from .exceptions import ConfigurationError, PgTableError
from .models import COLUMN_ATTR, TABLE_NAME_ATTR
from .resource import ResourceData
from .schema.ddl import SchemaChange
from .schema.reconciler import TableReconciler


console = Console()


def handle_errors(func):
    """Decorator to handle errors gracefully in CLI commands."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PgTableError as e:
            console.print(f"[red]Error:[/red] {e}")
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/yellow]")
            sys.exit(0)
        except Exception as e:
            console.print(f"[red]Unexpected error:[/red] {e}")
            if "--debug" in sys.argv:
                import traceback
                traceback.print_exc()
            sys.exit(1)
    return wrapper


def setup_logging(config: LoggingConfig, debug: bool = False) -> None:
    """Configure the root logger once from the logging section."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else config.level)

    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(config.format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=config.max_size,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


def _load_config(path: str, debug: bool) -> PgTableConfig:
    config = PgTableConfig.from_yaml(path)
    config.validate_config()
    setup_logging(config.logging, debug or config.debug)
    return config


config_option = click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    required=True,
    help="Configuration file path",
)


@click.group()
@click.version_option(__version__)
@click.option(
    "--debug", is_flag=True, help="Enable debug mode"
)
@click.pass_context
def main(ctx, debug):
    """pgtable: Declarative PostgreSQL table reconciliation."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="pgtable.yaml",
    help="Output configuration file path",
)
@handle_errors
def init(output: str):
    """Write an example configuration file."""
    if Path(output).exists():
        if not click.confirm(f"Configuration file {output} already exists. Overwrite?"):
            return

    _create_default_config().to_yaml(output)
    console.print(f"[green]✓[/green] Configuration file created: {output}")
    console.print("\n[yellow]Next steps:[/yellow]")
    console.print("1. Edit the database connection and declared tables")
    console.print(f"2. Run: pgtable plan --config {output}")
    console.print(f"3. Run: pgtable apply --config {output}")


@main.command()
@config_option
@click.pass_context
@handle_errors
def validate_config(ctx, config: str):
    """Validate configuration file."""
    console.print(f"Validating configuration: {config}")

    try:
        pgtable_config = _load_config(config, ctx.obj["debug"])
    except ConfigurationError as e:
        console.print(f"[red]✗[/red] Configuration error: {e}")
        sys.exit(1)

    console.print("[green]✓[/green] Configuration is valid")
    _display_config_summary(pgtable_config)


@main.command()
@config_option
@click.pass_context
@handle_errors
def plan(ctx, config: str):
    """Show the DDL needed to converge every declared table."""
    pgtable_config = _load_config(config, ctx.obj["debug"])
    asyncio.run(_run_plan(pgtable_config))


@main.command()
@config_option
@click.pass_context
@handle_errors
def apply(ctx, config: str):
    """Create or update every declared table."""
    pgtable_config = _load_config(config, ctx.obj["debug"])

    if pgtable_config.dry_run:
        console.print("[yellow]dry_run is enabled; showing the plan instead[/yellow]")
        asyncio.run(_run_plan(pgtable_config))
        return

    async def run_apply():
        async with ConnectionPool(pgtable_config.database) as pool:
            reconciler = TableReconciler(pool)
            for spec in pgtable_config.tables:
                data = await _declared_state(reconciler, spec)
                if data.is_new_resource():
                    console.print(f"Creating table [cyan]{spec.name}[/cyan]")
                    data = await reconciler.create(data)
                else:
                    console.print(f"Updating table [cyan]{data.id}[/cyan]")
                    data = await reconciler.update(data)
                _display_table(data)

    asyncio.run(run_apply())


@main.command()
@config_option
@click.argument("table")
@click.pass_context
@handle_errors
def describe(ctx, config: str, table: str):
    """Show the observed columns of TABLE."""
    pgtable_config = _load_config(config, ctx.obj["debug"])

    data = asyncio.run(_import_observed(pgtable_config, table))
    if not data.exists:
        console.print(f"[yellow]Table {table} not found[/yellow]")
        sys.exit(1)

    _display_table(data)


@main.command(name="import")
@config_option
@click.argument("table")
@click.pass_context
@handle_errors
def import_table(ctx, config: str, table: str):
    """Print TABLE as a declaration that can be pasted into the config."""
    pgtable_config = _load_config(config, ctx.obj["debug"])

    data = asyncio.run(_import_observed(pgtable_config, table))
    if not data.exists:
        console.print(f"[yellow]Table {table} not found[/yellow]")
        sys.exit(1)

    spec = TableSpec(
        name=data.get(TABLE_NAME_ATTR),
        columns=[ColumnSpec(**c) for c in data.get(COLUMN_ATTR)],
    )
    click.echo(
        yaml.dump(
            {"tables": [spec.model_dump(exclude_none=True)]},
            default_flow_style=False,
            sort_keys=False,
        )
    )


async def _run_plan(pgtable_config: PgTableConfig) -> None:
    async with ConnectionPool(pgtable_config.database) as pool:
        reconciler = TableReconciler(pool)
        for spec in pgtable_config.tables:
            data = await _declared_state(reconciler, spec)
            changes = await reconciler.plan(data)
            _display_plan(spec, changes)


async def _import_observed(pgtable_config: PgTableConfig, table: str) -> ResourceData:
    async with ConnectionPool(pgtable_config.database) as pool:
        return await TableReconciler(pool).import_table(table)


async def _declared_state(reconciler: TableReconciler, spec: TableSpec) -> ResourceData:
    """
    Pair the observed state of a declared table with its declaration.

    The observed catalog state plays the role of the previously recorded
    state; a table found under neither its current nor its declared name
    is a new resource.
    """
    candidates: List[str] = [spec.current_name]
    if spec.rename_from:
        # already renamed by an earlier apply
        candidates.append(spec.name)

    for name in candidates:
        observed = await reconciler.import_table(name)
        if observed.exists:
            return ResourceData.for_update(observed.id, observed.state(), spec.to_attributes())

    return ResourceData.for_create(spec.to_attributes())


def _display_plan(spec: TableSpec, changes: List[SchemaChange]) -> None:
    console.print(f"\n[bold cyan]{spec.name}[/bold cyan]")
    if not changes:
        console.print("  [green]No changes needed[/green]")
        return
    for change in changes:
        console.print(f"  {change.sql};", markup=False, highlight=False)


def _display_table(data: ResourceData) -> None:
    table = Table(title=f"Table {data.get(TABLE_NAME_ATTR)}")
    table.add_column("Column", style="cyan")
    table.add_column("Type")
    table.add_column("Max Length")
    table.add_column("Default")
    table.add_column("Nullable")

    for column in data.get(COLUMN_ATTR):
        max_length = column.get("max_length")
        table.add_row(
            column["name"],
            column["type"],
            str(max_length) if max_length is not None else "",
            column.get("default") or "",
            "yes" if column.get("is_null") else "no",
        )

    console.print(table)


def _display_config_summary(config: PgTableConfig) -> None:
    db = config.database
    console.print(f"\n[bold]Database:[/bold] {db.user}@{db.host}:{db.port}/{db.database}")
    console.print(f"[bold]Declared tables:[/bold] {len(config.tables)}")
    for spec in config.tables:
        rename = f" (renamed from {spec.rename_from})" if spec.rename_from else ""
        console.print(f"  • {spec.name}{rename}: {len(spec.columns)} column(s)")


def _create_default_config() -> PgTableConfig:
    return PgTableConfig(
        database=ConnectionConfig(
            host="localhost",
            port=5432,
            database="app",
            user="postgres",
            password="${PGPASSWORD}",
        ),
        tables=[
            TableSpec(
                name="users",
                columns=[
                    ColumnSpec(name="id", type="int"),
                    ColumnSpec(name="email", type="varchar", max_length=255),
                    ColumnSpec(name="nickname", type="text", is_null=True),
                ],
            )
        ],
    )


if __name__ == "__main__":
    main()
