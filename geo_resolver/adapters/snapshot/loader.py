"""Snapshot loader — reads bootstrap address → location tables from disk."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path

from geo_resolver.domain.value_objects.location import Location

logger = logging.getLogger(__name__)

_CSV_COLUMNS = {"address", "latitude", "longitude"}


def _load_json(file_path: Path, encoding: str) -> dict[str, Location]:
    with open(file_path, encoding=encoding) as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Snapshot {file_path} must be a JSON object keyed by address")

    return {address: Location.from_dict(record, address=address) for address, record in data.items()}


def _load_csv(file_path: Path, encoding: str) -> dict[str, Location]:
    with open(file_path, encoding=encoding, newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError(f"CSV file {file_path} has no header row")

        columns = {c.strip().lower() for c in reader.fieldnames}
        missing = _CSV_COLUMNS - columns
        if missing:
            raise ValueError(f"CSV file {file_path} is missing columns: {sorted(missing)}")

        locations: dict[str, Location] = {}
        for row in reader:
            row = {k.strip().lower(): (v or "").strip() for k, v in row.items() if k}
            address = row.pop("address")
            if not address:
                continue
            try:
                locations[address] = Location.from_dict(row, address=address)
            except ValueError:
                logger.warning("Skipping snapshot row without coordinates: '%s'", address)
        return locations


def load_snapshot_file(path: str | Path, encoding: str = "utf-8-sig") -> dict[str, Location]:
    """Load a snapshot table from a ``.json`` or ``.csv`` file.

    JSON: ``{"<address>": {"latitude": .., "longitude": .., "type": .., "name": ..}}``.
    CSV: header with at least ``address,latitude,longitude``.
    """
    file_path = Path(path)
    if file_path.suffix.lower() == ".csv":
        locations = _load_csv(file_path, encoding)
    else:
        locations = _load_json(file_path, encoding)

    logger.info("Read %d snapshot locations from %s", len(locations), file_path)
    return locations
