#!/usr/bin/env python3
"""
KUBESYNC CLI
------------
Command line access to the addressing and sync engine:

1. `path`     - API paths of resource spec files
2. `basename` - Spec file basenames of resource spec files
3. `sync`     - Reconcile a local clone of a sync repository

Author: KubeSync Team
Date: 2026-10-18
"""

import sys
import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Tuple

from rich.console import Console
from rich.panel import Panel

from kubesync.api.paths import spec_uri_path
from kubesync.api.request import resource_slug
from kubesync.cli.formatter import SyncFormatter
from kubesync.core.config import load_sync_options
from kubesync.core.errors import KubeSyncError
from kubesync.core.models import Action, DeleteRequest, K8sObject, SyncAction
from kubesync.spec.basename import kubernetes_spec_file_basename, spec_file_basename
from kubesync.spec.serializer import parse_spec
from kubesync.sync.project import GitSpecProject
from kubesync.sync.reconciler import SpecSynchronizer

# Global console for consistent styling across the application
console = Console()

VERSION = "1.0.0"


class KubeSyncCLI:
    """
    CLI wrapper that translates user commands into engine calls.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="kubesync",
            description="KubeSync - Kubernetes resource paths and spec sync repositories",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = SyncFormatter()
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("--version", action="version", version=f"kubesync v{VERSION}")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        path_parser = subparsers.add_parser("path", help="Print API paths of resource specs")
        path_parser.add_argument("files", nargs="+", help="JSON or YAML resource spec files")
        path_parser.add_argument("--action", default="read", choices=[a.value for a in Action],
                                 help="API action (default: read)")

        name_parser = subparsers.add_parser("basename", help="Print spec file basenames")
        name_parser.add_argument("files", nargs="+", help="JSON or YAML resource spec files")
        name_parser.add_argument("--ordered", action="store_true",
                                 help="Use NN_ prefixed apply-ordering names")

        sync_parser = subparsers.add_parser("sync", help="Sync resource specs into a local sync repo clone")
        sync_parser.add_argument("repo", help="Path to the git clone of the sync repository")
        sync_parser.add_argument("files", nargs="+", help="JSON or YAML resource spec files")
        sync_parser.add_argument("--app", required=True, help="Application as NAMESPACE/NAME")
        sync_parser.add_argument("--action", default="upsert", choices=[a.value for a in SyncAction])
        sync_parser.add_argument("--config", help="YAML configuration file with a 'sync' section")
        sync_parser.add_argument("--secret-key", help="Key used to encrypt Secret data values")
        sync_parser.add_argument("--ordered", action="store_true",
                                 help="Name new spec files with NN_ apply-ordering prefixes")
        sync_parser.add_argument("--no-push", action="store_true", help="Commit without pushing")

    def print_header(self, subtitle: str):
        console.print(Panel.fit(
            f"[bold cyan]KubeSync v{VERSION}[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def _load_resources(self, files: List[str]) -> List[Tuple[str, K8sObject]]:
        resources = []
        for f in files:
            path = Path(f)
            try:
                resources.append((f, parse_spec(path.read_text(encoding="utf-8-sig"), path.name)))
            except (OSError, KubeSyncError) as e:
                self.formatter.print_error(f, str(e))
        return resources

    def _run_path(self, args: argparse.Namespace) -> int:
        rows, failed = [], 0
        for f, resource in self._load_resources(args.files):
            try:
                rows.append((resource_slug(resource), spec_uri_path(resource, args.action)))
            except KubeSyncError as e:
                self.formatter.print_error(f, str(e))
                failed += 1
        self.formatter.print_rows(f"API paths ({args.action})", rows, "Path")
        return 1 if failed or len(rows) < len(args.files) else 0

    def _run_basename(self, args: argparse.Namespace) -> int:
        basename = kubernetes_spec_file_basename if args.ordered else spec_file_basename
        resources = self._load_resources(args.files)
        rows = [(resource_slug(r), basename(r)) for _, r in resources]
        self.formatter.print_rows("Spec file basenames", rows, "Basename")
        return 0 if len(rows) == len(args.files) else 1

    def _run_sync(self, args: argparse.Namespace) -> int:
        ns, sep, name = args.app.partition("/")
        if not sep or not ns or not name:
            self.formatter.print_error("--app", f"Expected NAMESPACE/NAME, got '{args.app}'")
            return 2

        options = load_sync_options(args.config)
        overrides = {}
        if args.secret_key:
            overrides["secret_key"] = args.secret_key
        if args.ordered:
            overrides["ordered_file_names"] = True
        if overrides:
            options = replace(options, **overrides)

        resources = [r for _, r in self._load_resources(args.files)]
        if len(resources) < len(args.files):
            return 1

        project = GitSpecProject(args.repo, push_enabled=not args.no_push)
        report = SpecSynchronizer(options).sync_resources(
            DeleteRequest(name=name, ns=ns), resources, args.action, project
        )
        self.formatter.print_sync_report(report)
        return 0

    def run(self, argv: List[str] = None) -> int:
        """Primary routing entry point."""
        args = self.parser.parse_args(argv)
        logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
        if args.command == "path":
            return self._run_path(args)
        if args.command == "basename":
            return self._run_basename(args)
        if args.command == "sync":
            self.print_header("Sync Repository")
            try:
                return self._run_sync(args)
            except KubeSyncError as e:
                self.formatter.print_error(args.repo, str(e))
                return 1
        self.print_header("Kubernetes Resource Specs")
        self.parser.print_help()
        return 0


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(KubeSyncCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
