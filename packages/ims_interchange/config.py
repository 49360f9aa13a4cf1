"""Runtime settings read from the environment.

Entrypoints call ``load_dotenv()`` before :func:`load_settings` so that a
local ``.env`` file can supply any of the variables below without overriding
values already exported in the shell:

- ``IMS_IMPORT_DIR``: where inbound source files are looked up when a
  relative path is given (default: current directory).
- ``IMS_EXPORT_DIR``: where export files are written when no ``--out`` is
  given (default: current directory).
- ``IMS_INTERCHANGE_LOG_LEVEL``: passed to
  :func:`~ims_interchange.logging_setup.configure_logging`.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict

IMPORT_DIR_ENV_VAR = "IMS_IMPORT_DIR"
EXPORT_DIR_ENV_VAR = "IMS_EXPORT_DIR"
LOG_LEVEL_ENV_VAR = "IMS_INTERCHANGE_LOG_LEVEL"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    import_dir: Path = Path(".")
    export_dir: Path = Path(".")
    log_level: str | None = None

    def import_path(self, path: str | os.PathLike[str]) -> Path:
        """Resolve ``path`` against ``import_dir`` unless it is absolute."""

        return self.import_dir / Path(path)

    def export_path(self, path: str | os.PathLike[str] | None) -> Path:
        """Resolve an export target; ``None`` means the export directory itself."""

        return self.export_dir if path is None else self.export_dir / Path(path)


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (``os.environ`` by default).

    Blank variables are treated as unset.
    """

    env = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for key, var in (
        ("import_dir", IMPORT_DIR_ENV_VAR),
        ("export_dir", EXPORT_DIR_ENV_VAR),
        ("log_level", LOG_LEVEL_ENV_VAR),
    ):
        raw = env.get(var, "").strip()
        if raw:
            values[key] = raw
    return Settings.model_validate(values)


__all__ = ["Settings", "load_settings"]
