"""Catalog loader — parses config/catalog.yaml into Catalog models.

The file has five sections: ``ages`` (each with its factories),
``research``, ``scientists``, ``weapons`` and ``enemies``.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from warprofits.models.catalog import (
    AgeDetails,
    Catalog,
    EnemyArchetype,
    FactoryDetails,
    ResearchDetails,
    ScientistDetails,
    WeaponStats,
)
from warprofits.util.constants import STONE_AGE

log = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = "config/catalog.yaml"


def _parse_factories(section: dict) -> tuple[FactoryDetails, ...]:
    factories: list[FactoryDetails] = []
    for key, attrs in (section or {}).items():
        if not isinstance(attrs, dict):
            continue
        factories.append(FactoryDetails(
            key=key,
            name=attrs.get("name", key),
            base_rate=float(attrs.get("rate", 0)),
            base_cost=float(attrs.get("cost", 0)),
            cost_multiplier=float(attrs.get("multiplier", 1.0)),
            starting_owned=int(attrs.get("starting_owned", 0)),
        ))
    return tuple(factories)


def _parse_ages(section: dict) -> tuple[AgeDetails, ...]:
    ages: list[AgeDetails] = []
    for key, attrs in (section or {}).items():
        if not isinstance(attrs, dict):
            continue
        ages.append(AgeDetails(
            key=key,
            name=attrs.get("name", key),
            unlocked=bool(attrs.get("unlocked", key == STONE_AGE)),
            factories=_parse_factories(attrs.get("factories", {})),
        ))
    return tuple(ages)


def _parse_weapons(section: dict, ages: tuple[AgeDetails, ...]) -> dict[str, WeaponStats]:
    """Parse weapon stats; each weapon's tier is the age of its factory."""
    tier_of = {f.key: age.key for age in ages for f in age.factories}
    weapons: dict[str, WeaponStats] = {}
    for key, attrs in (section or {}).items():
        if key not in tier_of:
            log.warning("Weapon %s has no factory, skipped", key)
            continue
        attrs = attrs or {}
        weapons[key] = WeaponStats(
            key=key,
            tier=tier_of[key],
            attack=float(attrs.get("attack", 0)),
            defense=float(attrs.get("defense", 0)),
            range=float(attrs.get("range", 0)),
        )
    return weapons


def load_catalog(path: str | Path = DEFAULT_CATALOG_PATH) -> Catalog:
    """Load all static content from a YAML file.

    Args:
        path: The catalog file, or a directory containing ``catalog.yaml``.

    Raises:
        FileNotFoundError: If the catalog file is missing.
        ValueError: If a research task targets an unknown age.
    """
    path = Path(path)
    if path.is_dir():
        path = path / "catalog.yaml"

    with path.open() as f:
        data = yaml.safe_load(f) or {}

    ages = _parse_ages(data.get("ages", {}))
    age_keys = {a.key for a in ages}

    research: list[ResearchDetails] = []
    for entry in data.get("research", []) or []:
        age_key = entry["age"]
        if age_key not in age_keys:
            raise ValueError(f"Research task {entry.get('name')!r} targets unknown age {age_key!r}")
        research.append(ResearchDetails(
            name=entry.get("name", f"Unlock {age_key}"),
            age_key=age_key,
            required=float(entry["required"]),
        ))

    sci_raw = data.get("scientists", {}) or {}
    scientists = ScientistDetails(
        base_cost=float(sci_raw.get("cost", 1000)),
        cost_multiplier=float(sci_raw.get("multiplier", 1.2)),
    )

    enemies = tuple(
        EnemyArchetype(
            name=e["name"],
            tier=e["tier"],
            wealth=float(e.get("wealth", 1.0)),
            effectiveness={k: float(v) for k, v in (e.get("effectiveness") or {}).items()},
        )
        for e in data.get("enemies", []) or []
    )

    catalog = Catalog(
        ages=ages,
        research=tuple(research),
        scientists=scientists,
        weapons=_parse_weapons(data.get("weapons", {}), ages),
        enemies=enemies,
    )
    log.info("Loaded catalog from %s: %d ages, %d factories, %d research tasks, %d enemies",
             path, len(ages), len(catalog.factory_keys()), len(research), len(enemies))
    return catalog
