"""Central configuration for the working-capital dashboard package."""
from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Context, Decimal
from pathlib import Path
from typing import Mapping

from wc_dashboard.domain.turnover import DEFAULT_COGS_RATIO

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"
ANALYSIS_CACHE_DIR = DATA_DIR / "ai-cache"
SAMPLE_DATA_PATH = Path(__file__).resolve().parent / "data" / "sample_snapshots.csv"

DEFAULT_CACHE_TTL_SECONDS = 60.0
DEFAULT_ENTITY_FILTER = "all"


@dataclass(slots=True, frozen=True)
class Settings:
    decimal_context: Context
    cogs_ratio: Decimal
    cache_ttl_seconds: float
    analysis_cache_dir: Path
    sample_data_path: Path


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        decimal_context=Context(prec=int(env.get("WC_DECIMAL_PRECISION", "28"))),
        cogs_ratio=Decimal(env.get("WC_COGS_RATIO", str(DEFAULT_COGS_RATIO))),
        cache_ttl_seconds=float(env.get("WC_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS)),
        analysis_cache_dir=Path(env.get("WC_ANALYSIS_CACHE_DIR", str(ANALYSIS_CACHE_DIR))),
        sample_data_path=SAMPLE_DATA_PATH,
    )


SETTINGS = load_settings()
