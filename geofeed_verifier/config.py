# geofeed_verifier/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from geofeed_verifier.datasources.mmdb import DEFAULT_CITY_DB
from geofeed_verifier.errors import ConfigurationError

ENV_PREFIX = "GEOFEED_VERIFIER_"


@dataclass(frozen=True)
class VerifierConfig:
    geofeed_path: Optional[Path] = None
    db_path: Optional[Path] = DEFAULT_CITY_DB
    isp_path: Optional[Path] = None
    lax_mode: bool = False
    asn_column: bool = False

    def validate(self) -> None:
        """Raise ConfigurationError unless every named input is readable."""
        missing_gf = _is_blank(self.geofeed_path)
        missing_db = _is_blank(self.db_path)

        if missing_gf and missing_db:
            raise ConfigurationError("--gf is required and --db can not be an empty string")
        if missing_gf:
            raise ConfigurationError("--gf is required")
        if missing_db:
            raise ConfigurationError("--db is required")

        _check_readable(self.geofeed_path, "geofeed")
        _check_readable(self.db_path, "database")
        if self.isp_path is not None:
            _check_readable(self.isp_path, "ISP database")


def _is_blank(path: Optional[Path]) -> bool:
    # typer turns an empty option value into Path(".")
    return path is None or str(path) in ("", ".")


def _check_readable(path: Path, label: str) -> None:
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"{label} file does not exist: {path}")
    if not os.access(path, os.R_OK):
        raise ConfigurationError(f"{label} file is not readable: {path}")
