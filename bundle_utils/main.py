"""bundle-utils - inspect bootstrap packages and resolve bundles."""

import logging
import sys

import click
from rich.table import Table

from .bundles import find_bundle
from .bundles import is_fragment
from .console import console
from .console import err_console
from .logging_setup import init_json_logging
from .packages import bootstrap_packages_from_settings
from .packages import find_malformed_patterns
from .packages import get_package_name
from .packages import package_match
from .providers import ImportedPackages
from .providers import Package
from .providers import get_packages
from .registry_file import RegistryFileError
from .registry_file import load_registry
from .settings import SettingsManager

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.option("--log-file", type=click.Path(dir_okay=False), help="Write JSONL logs to this file")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level for the JSONL log",
)
@click.pass_context
def cli(ctx: click.Context, log_file: str | None, log_level: str | None):
    """Inspect bootstrap packages and resolve bundles by symbolic name."""
    if log_file or log_level:
        init_json_logging(log_file, log_level)

    ctx.obj = SettingsManager()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


@cli.command("packages")
@click.option("--package", "-p", "extra", multiple=True, help="Explicit package name to append")
@click.option("--include-imported", is_flag=True, help="Append packages visible to the import system")
@click.pass_obj
def packages_cmd(settings: SettingsManager, extra: tuple[str, ...], include_imported: bool):
    """Print the effective bootstrap package list, one per line."""
    explicit = [Package(name) for name in extra]
    if include_imported:
        explicit.extend(get_packages(ImportedPackages()))

    for pattern in bootstrap_packages_from_settings(settings, explicit):
        click.echo(pattern)


@cli.command("match")
@click.argument("package_name")
@click.option("--pattern", "-p", "patterns", multiple=True, help="Pattern to test (default: configured packages)")
@click.pass_obj
def match_cmd(settings: SettingsManager, package_name: str, patterns: tuple[str, ...]):
    """Test whether PACKAGE_NAME is a bootstrap package. Exits 1 when it is not."""
    effective = list(patterns) if patterns else bootstrap_packages_from_settings(settings)

    if package_match(effective, package_name):
        click.echo("match")
    else:
        click.echo("no match")
        sys.exit(1)


@cli.command("package-name")
@click.argument("class_name")
def package_name_cmd(class_name: str):
    """Print the package part of a fully qualified CLASS_NAME."""
    click.echo(get_package_name(class_name))


@cli.command("check")
@click.option("--pattern", "-p", "patterns", multiple=True, help="Pattern to check (default: configured packages)")
@click.pass_obj
def check_cmd(settings: SettingsManager, patterns: tuple[str, ...]):
    """Report package patterns that are malformed."""
    effective = list(patterns) if patterns else bootstrap_packages_from_settings(settings)
    malformed = find_malformed_patterns(effective)

    if not malformed:
        console.print(f"[green]✓[/green] {len(effective)} patterns OK")
        return

    for pattern in malformed:
        err_console.print(f"[red]✗[/red] malformed pattern: {pattern!r}")
    sys.exit(1)


def _scope_options(verb: str):
    def decorator(f):
        f = click.option(
            "--global", "scope_flag", flag_value="user", help=f"{verb} user settings (~/.bundle-utils/settings.yaml)"
        )(f)
        f = click.option(
            "--local", "scope_flag", flag_value="local", help=f"{verb} local settings (.bundle-utils/settings.local.yaml)"
        )(f)
        f = click.option(
            "--project", "scope_flag", flag_value="project", help=f"{verb} project settings (default)"
        )(f)
        return f

    return decorator


@cli.group("config", invoke_without_command=True)
@click.pass_context
def config_group(ctx: click.Context):
    """Read and write bundle-utils properties."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


@config_group.command("get")
@click.argument("key")
@click.pass_obj
def config_get(settings: SettingsManager, key: str):
    """Print the effective value of property KEY."""
    click.echo(settings.get_property(key))


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@_scope_options("Store in")
@click.pass_obj
def config_set(settings: SettingsManager, key: str, value: str, scope_flag: str | None):
    """Set property KEY to VALUE."""
    scope_flag = scope_flag or "project"
    settings.set_property(key, value, scope=scope_flag)
    console.print(f"[green]✓[/green] Set {key} ({scope_flag})")


@config_group.command("unset")
@click.argument("key")
@_scope_options("Remove from")
@click.pass_obj
def config_unset(settings: SettingsManager, key: str, scope_flag: str | None):
    """Remove property KEY. Exits 1 when it was not set at that scope."""
    scope_flag = scope_flag or "project"
    if not settings.remove_property(key, scope=scope_flag):
        err_console.print(f"[yellow]{key} is not set in {scope_flag} settings[/yellow]")
        sys.exit(1)
    console.print(f"[green]✓[/green] Removed {key} ({scope_flag})")


@cli.command("find")
@click.argument("registry_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("symbolic_name")
@click.option("--no-follow-host", is_flag=True, help="Return a fragment itself rather than its host")
def find_cmd(registry_file: str, symbolic_name: str, no_follow_host: bool):
    """Find SYMBOLIC_NAME in a YAML bundle REGISTRY_FILE."""
    try:
        registry = load_registry(registry_file)
    except RegistryFileError as e:
        raise click.ClickException(str(e)) from e

    bundle = find_bundle(registry, symbolic_name, fragment_host=not no_follow_host)
    if bundle is None:
        err_console.print(f"[yellow]Bundle '{symbolic_name}' not found[/yellow]")
        sys.exit(1)

    table = Table(title=f"Bundle for '{symbolic_name}'", show_header=True, header_style="bold cyan")
    table.add_column("Field", style="green")
    table.add_column("Value")
    table.add_row("Symbolic name", bundle.symbolic_name)
    table.add_row("Version", bundle.version or "-")
    table.add_row("Fragment", "yes" if is_fragment(bundle) else "no")
    table.add_row("Fragment host", bundle.fragment_host or "-")
    console.print(table)


def main():
    cli()


if __name__ == "__main__":
    main()
