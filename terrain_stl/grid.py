"""Canonical elevation grid and validation of JSON payloads"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Union

import numpy as np

from .exceptions import StructuralError


@dataclass(frozen=True, eq=False)
class Grid:
    """
    Elevation sampled on a lat/lon grid in canonical order.

    ``elevation[i, j]`` is the value at ``lat[i]``, ``lon[j]``.
    """

    lat: np.ndarray
    lon: np.ndarray
    elevation: np.ndarray

    def __post_init__(self):
        lat = np.array(self.lat, dtype=np.float64)
        lon = np.array(self.lon, dtype=np.float64)
        elevation = np.array(self.elevation, dtype=np.float64)

        if lat.ndim != 1 or lon.ndim != 1:
            raise StructuralError(
                f"lat and lon must be 1D, got shapes {lat.shape} and {lon.shape}"
            )
        if elevation.shape != (lat.size, lon.size):
            raise StructuralError(
                f"elevation shape {elevation.shape} does not match "
                f"(len(lat), len(lon)) = ({lat.size}, {lon.size})"
            )

        for name, arr in (("lat", lat), ("lon", lon), ("elevation", elevation)):
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    @property
    def shape(self):
        return self.elevation.shape


def _ndim(values) -> int:
    try:
        return np.ndim(values)
    except ValueError:
        # ragged nesting
        return 1


def _to_vector(values, name: str) -> np.ndarray:
    if isinstance(values, (str, bytes)) or _ndim(values) != 1:
        raise StructuralError(f"'{name}' must be a 1D array, got {type(values).__name__}")
    try:
        return np.array([np.nan if v is None else v for v in values], dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise StructuralError(f"'{name}' contains non-numeric values: {exc}") from exc


def grid_from_json(payload: Mapping) -> Grid:
    """
    Build a Grid from a ``{lat, lon, elevation}`` mapping.

    JSON ``null`` entries in the elevation rows are read as no-data (NaN).
    """
    if not isinstance(payload, Mapping):
        raise StructuralError(f"Grid payload must be an object, got {type(payload).__name__}")

    missing = [key for key in ("lat", "lon", "elevation") if key not in payload]
    if missing:
        raise StructuralError(f"Grid payload is missing field(s): {', '.join(missing)}")

    lat = _to_vector(payload["lat"], "lat")
    lon = _to_vector(payload["lon"], "lon")

    rows = payload["elevation"]
    if isinstance(rows, (str, bytes)) or _ndim(rows) not in (1, 2):
        raise StructuralError(f"'elevation' must be an array of rows, got {type(rows).__name__}")
    if len(rows) != lat.size:
        raise StructuralError(
            f"'elevation' has {len(rows)} rows but 'lat' has {lat.size} values"
        )

    elevation = np.empty((lat.size, lon.size), dtype=np.float64)
    for i, row in enumerate(rows):
        values = _to_vector(row, f"elevation[{i}]")
        if values.size != lon.size:
            raise StructuralError(
                f"elevation row {i} has {values.size} values but 'lon' has {lon.size}"
            )
        elevation[i] = values

    return Grid(lat=lat, lon=lon, elevation=elevation)


def read_json_grid(json_path: Union[str, Path]) -> Grid:
    """Read a pre-converted ``{lat, lon, elevation}`` JSON file"""
    with open(json_path) as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as exc:
            raise StructuralError(f"{json_path} is not valid JSON: {exc}") from exc
    return grid_from_json(payload)
