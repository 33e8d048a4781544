"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy GraphStore initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from coterie.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from coterie.config.settings import CoterieSettings
    from coterie.infrastructure.store.store import GraphStore
    from coterie.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``. The store is lazily
    opened on first use so ``--help`` and ``--version`` never touch the
    database or the network.
    """

    def __init__(self, settings: CoterieSettings) -> None:
        self.settings = settings
        self._store: GraphStore | None = None

        from coterie.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def store(self) -> GraphStore:
        """The store instance (opened lazily on first access).

        A misconfigured backend is reported like any other failed result.
        """
        store = self._store
        if store is None:
            from coterie.infrastructure.errors import StoreError
            from coterie.infrastructure.store.factory import open_store
            from coterie.services._helpers import error_result

            try:
                store = open_store(self.settings)
            except StoreError as exc:
                self.emit(error_result("open_store", exc))
                raise SystemExit(1) from exc
            self._store = store
        return store

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
