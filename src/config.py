from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

DEFAULT_PRIMARY_SOURCE = "drug_interactions"
DEFAULT_FALLBACK_SOURCES: Tuple[str, ...] = ("DrugInteraction", "druginteraction")
DEFAULT_DATA_DIR = os.path.join(BASE_DIR, "..", "data", "tables")


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def _env_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ResolverConfig:
    """
    Which record sources the resolver queries, in priority order.
    The primary source defaults to DEFAULT_PRIMARY_SOURCE unless overridden.
    """
    primary_source_override: Optional[str] = None
    fallback_sources: Tuple[str, ...] = DEFAULT_FALLBACK_SOURCES

    @property
    def sources(self) -> Tuple[str, ...]:
        primary = (self.primary_source_override or "").strip() or DEFAULT_PRIMARY_SOURCE
        ordered: List[str] = []
        for name in (primary, *self.fallback_sources):
            if name and name not in ordered:
                ordered.append(name)
        return tuple(ordered)


@dataclass(frozen=True)
class Settings:
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    database_url: Optional[str] = None
    data_dir: str = DEFAULT_DATA_DIR
    cors_origins: Tuple[str, ...] = ("*",)
    log_level: str = "INFO"
    log_json: bool = False


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    fallback_env = env.get("DRUG_INTERACTIONS_FALLBACK_TABLES")
    fallback = tuple(_split_list(fallback_env)) if fallback_env is not None else DEFAULT_FALLBACK_SOURCES

    # CORS: set CORS_ORIGINS="http://localhost:3000,https://your-frontend.com"
    cors_env = env.get("CORS_ORIGINS", "*")
    cors = ("*",) if cors_env.strip() == "*" else tuple(_split_list(cors_env))

    return Settings(
        resolver=ResolverConfig(
            primary_source_override=env.get("DRUG_INTERACTIONS_TABLE") or None,
            fallback_sources=fallback,
        ),
        database_url=env.get("DATABASE_URL") or None,
        data_dir=env.get("DRUG_DATA_DIR") or DEFAULT_DATA_DIR,
        cors_origins=cors,
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        log_json=_env_flag(env.get("LOG_JSON")),
    )
