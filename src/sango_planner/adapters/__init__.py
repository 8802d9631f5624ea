"""Catalog and trait table ingestion (CSV / JSON files)."""

from .csv_catalog import CsvCatalogReader, parse_buildings
from .trait_table import TraitTableError, dump_trait_json, load_trait_table, parse_trait_csv, parse_trait_json

__all__ = [
    "CsvCatalogReader",
    "TraitTableError",
    "dump_trait_json",
    "load_trait_table",
    "parse_buildings",
    "parse_trait_csv",
    "parse_trait_json",
]
