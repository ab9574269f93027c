#!/usr/bin/env python3
"""Application management CLI tool."""

import argparse
import json
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

# Ensure project root is in path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from core import constants
from core.applications.discovery import ApplicationDiscovery
from core.errors import DiscoveryError, LoadError
from core.panel.cache import clear_cached_renditions
from core.panel.renditions import DEFAULT_RENDITIONS
from core.paths import PanelPaths

console = Console()


def get_paths() -> PanelPaths:
    """Create a PanelPaths instance from the environment."""
    return PanelPaths(fs_root=constants.FS_ROOT, install_root=constants.APPLICATIONS_DIR)


def get_installed(discovery: ApplicationDiscovery) -> list:
    try:
        return discovery.list_installed_identifiers()
    except DiscoveryError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def cmd_list(args):
    """List all installed applications."""
    paths = get_paths()
    discovery = ApplicationDiscovery(paths.install_root)
    identifiers = get_installed(discovery)

    if not identifiers:
        console.print("No applications installed.")
        return

    table = Table(title=f"Applications in {paths.install_root}")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("Frontend")
    table.add_column("Status")

    for application_id in identifiers:
        try:
            d = discovery.read_descriptor(paths.application_directory(application_id))
        except LoadError as e:
            table.add_row(application_id, "-", "-", "-", f"[red]{e.reason}[/red]")
            continue
        frontend = "embedded" if d.has_embedded_frontend else (d.external_url or "none")
        table.add_row(d.id, d.display_name, str(d.version), frontend, "[green]ok[/green]")

    console.print(table)


def cmd_info(args):
    """Show detailed application information."""
    paths = get_paths()
    discovery = ApplicationDiscovery(paths.install_root)
    application_dir = paths.application_directory(args.application_id)

    try:
        d = discovery.read_descriptor(application_dir)
    except LoadError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    print(f"Application: {d.id}")
    print(f"  Name:        {d.display_name}")
    print(f"  Version:     {d.version}")
    print(f"  Description: {d.description}")
    print(f"  Path:        {application_dir}")
    print(f"  Entry Point: {d.entry_point}")
    if d.frontend:
        print(f"  Frontend:    {d.frontend.entry_point}")
    if d.external_frontend:
        print(f"  External:    {d.external_frontend.url}")
    print(f"  Credits:     {json.dumps(d.credits.model_dump(), indent=4, ensure_ascii=False)}")


def cmd_clear_cache(args):
    """Delete cached icon renditions."""
    paths = get_paths()
    try:
        cleared = clear_cached_renditions(paths, args.application_id)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    if cleared:
        print(f"Cleared cached renditions for {args.application_id or 'all applications'}")
    else:
        print("Nothing cached")


def cmd_doctor(args):
    """Run health checks on the application install root and panel cache."""
    issues = []
    warnings = []
    paths = get_paths()

    if not paths.install_root.is_dir():
        issues.append(f"Application install root missing: {paths.install_root}")
    if not paths.fallback_icon_path().is_file():
        issues.append(f"Fallback icon missing: {paths.fallback_icon_path()} (start the service to provision it)")

    discovery = ApplicationDiscovery(paths.install_root)
    identifiers = get_installed(discovery) if paths.install_root.is_dir() else []

    sources = sorted({r.source for r in DEFAULT_RENDITIONS.values()})
    for application_id in identifiers:
        application_dir = paths.application_directory(application_id)
        try:
            d = discovery.read_descriptor(application_dir)
        except LoadError as e:
            issues.append(str(e))
            continue

        entry_file = application_dir / f"{d.entry_module}.py"
        if not entry_file.exists():
            issues.append(f"Application '{d.id}': entry module missing: {entry_file}")

        for source in sources:
            if not (application_dir / source).is_file():
                warnings.append(f"Application '{d.id}': no {source}, fallback icon will be served")

    for warning in warnings:
        console.print(f"[yellow]warning:[/yellow] {warning}")

    if issues:
        print(f"Found {len(issues)} issue(s):")
        for i, issue in enumerate(issues, 1):
            print(f"  {i}. {issue}")
        sys.exit(1)
    else:
        print(f"All checks passed. {len(identifiers)} application(s) installed.")


def main():
    parser = argparse.ArgumentParser(description="Panel Application Manager")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # list
    subparsers.add_parser("list", help="List installed applications")

    # info
    info_parser = subparsers.add_parser("info", help="Show application details")
    info_parser.add_argument("application_id", help="Application ID")

    # clear-cache
    clear_parser = subparsers.add_parser("clear-cache", help="Delete cached icon renditions")
    clear_parser.add_argument("application_id", nargs="?", help="Application ID (all when omitted)")

    # doctor
    subparsers.add_parser("doctor", help="Run health checks")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "list": cmd_list,
        "info": cmd_info,
        "clear-cache": cmd_clear_cache,
        "doctor": cmd_doctor,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
