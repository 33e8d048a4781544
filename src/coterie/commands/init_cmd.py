"""Command: project initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from coterie.commands._base import CoterieCommand
from coterie.config.models import BackendKind, StoreConfig

if TYPE_CHECKING:
    from coterie.commands._context import AppContext
    from coterie.config.settings import CoterieSettings

_INIT_EXAMPLES = """\
  coterie init
  coterie init /path/to/project --data-dir data
  COTERIE_REMOTE__API_KEY=... coterie init --backend remote"""


def _project_settings(app: AppContext, root: Path, backend: str, data_dir: str) -> CoterieSettings:
    """Settings for *root*: its own coterie.toml when present, else the flags."""
    from coterie.config.discovery import CONFIG_FILENAME
    from coterie.config.settings import CoterieSettings

    config_file = root / CONFIG_FILENAME
    if config_file.is_file():
        return CoterieSettings.from_cli(
            config_path=str(config_file),
            root=root,
            json_output=app.settings.json_output,
            quiet=app.settings.quiet,
            verbose=app.settings.verbose,
            log_json=app.settings.log_json,
        )
    return app.settings.model_copy(
        update={
            "root": root,
            "config_path": None,
            "store": StoreConfig(backend=BackendKind(backend), data_dir=Path(data_dir)),
        }
    )


@click.command("init", cls=CoterieCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option(
    "--backend",
    type=click.Choice([b.value for b in BackendKind], case_sensitive=False),
    default=BackendKind.LOCAL.value,
    show_default=True,
    help="Store backend written to coterie.toml.",
)
@click.option(
    "--data-dir", default=".coterie", show_default=True, help="Local database directory."
)
@click.pass_obj
def init_cmd(app: AppContext, path: str, backend: str, data_dir: str) -> None:
    """Write coterie.toml and create or verify the store."""
    from coterie.infrastructure.errors import StoreError
    from coterie.infrastructure.store.factory import open_store
    from coterie.services._helpers import error_result
    from coterie.services.init import InitService

    root = Path(path).resolve()
    settings = _project_settings(app, root, backend.lower(), data_dir)
    try:
        store = open_store(settings)
    except StoreError as exc:
        app.emit(error_result("init", exc))
        return
    with store:
        result = InitService.init_project(
            root,
            store,
            backend=settings.store.backend,
            data_dir=str(settings.store.data_dir),
        )
    app.emit(result)
