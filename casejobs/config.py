from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Tuple

RESOLUTION_STRATEGIES = ("first-contains", "best-similarity")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass
class Settings:
    db_url: str = "sqlite:///./casejobs.db"
    export_dir: Path = field(default_factory=lambda: Path("exports"))
    vat_rate: int = 20
    city_prefixes: Tuple[str, ...] = ("Antalya",)
    default_city: str = "Antalya"
    districts: Tuple[str, ...] = ("Korkuteli",)
    placeholder_city: str = "Bilinmiyor"
    resolution_strategy: str = "first-contains"
    min_similarity: int = 75
    strict_parsing: bool = False
    synthesize_dates: bool = True
    synthesize_amounts: bool = True
    auto_create_courts: bool = False
    header_rows: int = 12
    random_seed: Optional[int] = None
    log_level: str = "INFO"
    similarity_tiers: Dict[str, int] = field(
        default_factory=lambda: {"likely": 90, "probable": 75, "possible": 60}
    )

    @classmethod
    def from_env(cls) -> "Settings":
        strategy = os.getenv("CASEJOBS_RESOLUTION_STRATEGY", cls.resolution_strategy)
        if strategy not in RESOLUTION_STRATEGIES:
            raise ValueError(
                f"CASEJOBS_RESOLUTION_STRATEGY must be one of {', '.join(RESOLUTION_STRATEGIES)}"
            )
        seed = os.getenv("CASEJOBS_RANDOM_SEED")
        settings = cls(
            db_url=os.getenv("CASEJOBS_DB_URL", cls.db_url),
            export_dir=Path(os.getenv("CASEJOBS_EXPORT_DIR", "exports")),
            vat_rate=int(os.getenv("CASEJOBS_VAT_RATE", cls.vat_rate)),
            city_prefixes=_env_list("CASEJOBS_CITY_PREFIXES", cls.city_prefixes),
            default_city=os.getenv("CASEJOBS_DEFAULT_CITY", cls.default_city),
            districts=_env_list("CASEJOBS_DISTRICTS", cls.districts),
            placeholder_city=os.getenv("CASEJOBS_PLACEHOLDER_CITY", cls.placeholder_city),
            resolution_strategy=strategy,
            min_similarity=int(os.getenv("CASEJOBS_MIN_SIMILARITY", cls.min_similarity)),
            strict_parsing=_env_bool("CASEJOBS_STRICT_PARSING", cls.strict_parsing),
            synthesize_dates=_env_bool("CASEJOBS_SYNTHESIZE_DATES", cls.synthesize_dates),
            synthesize_amounts=_env_bool("CASEJOBS_SYNTHESIZE_AMOUNTS", cls.synthesize_amounts),
            auto_create_courts=_env_bool("CASEJOBS_AUTO_CREATE_COURTS", cls.auto_create_courts),
            header_rows=int(os.getenv("CASEJOBS_HEADER_ROWS", cls.header_rows)),
            random_seed=int(seed) if seed else None,
            log_level=os.getenv("CASEJOBS_LOG_LEVEL", cls.log_level).upper(),
        )
        settings.export_dir.mkdir(parents=True, exist_ok=True)
        return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


__all__ = ["Settings", "get_settings", "RESOLUTION_STRATEGIES"]
