"""Dataset loader wrapping the shared schema models."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from .schema import (
    CatalogCategory,
    CatalogItem,
    ConfigurationError,
    ContributionSide,
    ContributionTable,
    DatasetMeta,
    ExciseConfig,
    ExpenseCatalog,
    FiscalDataset,
    IncomeTaxConfig,
    Jurisdiction,
    PayrollConfig,
    PersonalMinimumConfig,
    Regime,
    SocialSecurityConfig,
    TaxBracket,
    WorkIncomeReductionConfig,
)

_LOGGER = logging.getLogger(__name__)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
DATASET_FILE = CONFIG_DIRECTORY / "dataset.yaml"
CATALOG_FILE = CONFIG_DIRECTORY / "catalog.yaml"
DATASET_ENV_VAR = "FISCALTICKET_DATASET"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


def resolve_dataset_path() -> Path:
    """Return the dataset location, honouring the environment override."""

    override = os.getenv(DATASET_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return DATASET_FILE


def parse_dataset(raw_dataset: dict[str, Any]) -> FiscalDataset:
    """Validate a raw mapping into a :class:`FiscalDataset`."""

    try:
        return FiscalDataset.model_validate(raw_dataset)
    except ValidationError as error:
        raise ConfigurationError(f"Dataset validation failed: {error}") from error


def load_dataset_file(path: Path) -> FiscalDataset:
    """Read and validate the dataset stored at ``path`` without caching."""

    if not path.exists():
        raise FileNotFoundError(f"Fiscal dataset not found: {path}")
    return parse_dataset(_load_yaml(path))


@lru_cache(maxsize=4)
def _load_dataset_from(path: Path) -> FiscalDataset:
    dataset = load_dataset_file(path)
    _LOGGER.info(
        "Loaded fiscal dataset snapshot %s with %d jurisdictions from %s",
        dataset.meta.snapshot,
        len(dataset.jurisdictions),
        path.name,
    )
    return dataset


def load_dataset() -> FiscalDataset:
    """Load and cache the active fiscal dataset."""

    return _load_dataset_from(resolve_dataset_path())


@lru_cache(maxsize=1)
def load_catalog() -> ExpenseCatalog:
    """Load and cache the default expense catalogue."""

    if not CATALOG_FILE.exists():
        raise FileNotFoundError("Expense catalogue not found")

    raw_catalog = _load_yaml(CATALOG_FILE)

    try:
        return ExpenseCatalog.model_validate(raw_catalog)
    except ValidationError as error:
        raise ConfigurationError(f"Catalogue validation failed: {error}") from error


def available_jurisdictions() -> Sequence[Jurisdiction]:
    """Return the jurisdictions declared in the active dataset."""

    return load_dataset().jurisdictions


def clear_caches() -> None:
    """Forget cached dataset and catalogue instances."""

    _load_dataset_from.cache_clear()
    load_catalog.cache_clear()


__all__ = [
    "CATALOG_FILE",
    "CONFIG_DIRECTORY",
    "CatalogCategory",
    "CatalogItem",
    "ConfigurationError",
    "ContributionSide",
    "ContributionTable",
    "DATASET_ENV_VAR",
    "DATASET_FILE",
    "DatasetMeta",
    "ExciseConfig",
    "ExpenseCatalog",
    "FiscalDataset",
    "IncomeTaxConfig",
    "Jurisdiction",
    "PayrollConfig",
    "PersonalMinimumConfig",
    "Regime",
    "SocialSecurityConfig",
    "TaxBracket",
    "WorkIncomeReductionConfig",
    "available_jurisdictions",
    "clear_caches",
    "load_catalog",
    "load_dataset",
    "load_dataset_file",
    "parse_dataset",
    "resolve_dataset_path",
]
