"""Config file discovery and loading.

Walk-up finder locates coterie.toml, similar to how git finds .git/.
Supports COTERIE_CONFIG env var and --config CLI flag overrides.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from coterie.config.models import CoterieConfig

CONFIG_FILENAME = "coterie.toml"
CONFIG_ENV_VAR = "COTERIE_CONFIG"

DEFAULT_CONFIG = """\
# Coterie configuration. Only overrides belong here; see the defaults in
# coterie.config.models.

[store]
backend = "{backend}"
data_dir = "{data_dir}"

# [remote]
# url = "https://your-project.supabase.co"
# api_key comes from COTERIE_REMOTE__API_KEY

# [layout]
# canvas_height = 3000.0

# [matching]
# threshold = 0.8
"""


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for coterie.toml.

    Returns the path to the config file, or None if not found.
    Checks COTERIE_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Path | None = None, cwd: Path | None = None) -> CoterieConfig:
    """Load and validate config from a TOML file.

    If *path* is None, uses find_config(*cwd*) to discover the file.
    Returns default CoterieConfig if no file is found.
    """
    if path is None:
        path = find_config(cwd)

    if path is None:
        return CoterieConfig()

    raw = path.read_text(encoding="utf-8")
    data: dict[str, Any] = tomllib.loads(raw)
    return CoterieConfig.model_validate(data)


def render_default_config(*, backend: str = "local", data_dir: str = ".coterie") -> str:
    return DEFAULT_CONFIG.format(backend=backend, data_dir=data_dir)
