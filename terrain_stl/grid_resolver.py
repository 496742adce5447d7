"""Locate lat/lon/elevation variables in array datasets and canonicalize the grid"""

from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import xarray as xr

from .config import SourceConfig
from .exceptions import ResolutionError
from .grid import Grid, grid_from_json, read_json_grid

NETCDF_SUFFIXES = ('.nc', '.nc4', '.cdf', '.netcdf')


def find_variable(names: Sequence[str], candidates: Sequence[str]) -> Optional[str]:
    """
    Return the first variable name matching the candidate list.

    Candidates are tried in priority order and compared case-insensitively,
    so a later candidate never wins over an earlier one.
    """
    lowered = {}
    for name in names:
        lowered.setdefault(str(name).lower(), name)

    for candidate in candidates:
        match = lowered.get(candidate.lower())
        if match is not None:
            return match
    return None


def strip_degenerate_axes(flat: np.ndarray,
                          dims: Sequence[str],
                          sizes: Sequence[int],
                          keep: Sequence[str]) -> Tuple[np.ndarray, List[str], List[int]]:
    """
    Drop size-1 axes that are not lat/lon from both ends of a variable.

    Leading axes are removed first and the buffer keeps its trailing values,
    then trailing axes are removed and the buffer keeps its leading values.

    Args:
        flat: Raw values in storage order
        dims: Dimension names of the variable
        sizes: Declared size of each dimension
        keep: Dimension names that must never be stripped

    Returns:
        (flat, dims, sizes) after stripping
    """
    flat = np.asarray(flat).ravel()
    dims = list(dims)
    sizes = [int(s) for s in sizes]

    while dims and sizes[0] == 1 and dims[0] not in keep:
        dims.pop(0)
        sizes.pop(0)
        expected = int(np.prod(sizes)) if sizes else 1
        flat = flat[max(flat.size - expected, 0):]

    while dims and sizes[-1] == 1 and dims[-1] not in keep:
        dims.pop()
        sizes.pop()
        expected = int(np.prod(sizes)) if sizes else 1
        flat = flat[:expected]

    return flat, dims, sizes


def infer_lon_major(dims: Sequence[str],
                    sizes: Sequence[int],
                    lat_dim: str,
                    lon_dim: str,
                    n_lat: int,
                    n_lon: int) -> bool:
    """
    Decide whether a 2D variable is stored longitude-major.

    Dimension names are checked first. When they say nothing, the sizes are
    compared against the lat/lon counts; equal sizes cannot be told apart and
    raise ResolutionError.
    """
    d0, d1 = dims
    s0, s1 = sizes

    lat_major_by_name = d0 == lat_dim or d1 == lon_dim
    lon_major_by_name = d0 == lon_dim or d1 == lat_dim
    if lat_major_by_name != lon_major_by_name:
        return lon_major_by_name

    fits_lat_major = (s0, s1) == (n_lat, n_lon)
    fits_lon_major = (s0, s1) == (n_lon, n_lat)

    if fits_lat_major and fits_lon_major:
        raise ResolutionError(
            f"Cannot interpret dimension order {tuple(dims)} with sizes {tuple(sizes)}: "
            f"lat and lon both have {n_lat} values and no dimension name matches "
            f"'{lat_dim}' or '{lon_dim}'"
        )
    if not (fits_lat_major or fits_lon_major):
        raise ResolutionError(
            f"Cannot interpret dimension order {tuple(dims)} with sizes {tuple(sizes)}: "
            f"expected ({n_lat}, {n_lon}) or ({n_lon}, {n_lat})"
        )

    print(f"Warning: dimension order {tuple(dims)} inferred from sizes "
          f"({'lon' if fits_lon_major else 'lat'}-major)")
    return fits_lon_major


def _values_along(var, dim: str) -> np.ndarray:
    """Values of a coordinate variable along ``dim``

    Curvilinear (2D) coordinates are read at index 0 of their other axes.
    """
    if var.ndim > 1:
        var = var.isel({d: 0 for d in var.dims if d != dim})
    return np.asarray(var.values, dtype=np.float64).ravel()


class GridSourceResolver:
    """Resolve an xarray Dataset into a canonical Grid"""

    def __init__(self, config: Optional[SourceConfig] = None):
        self.config = config or SourceConfig()

    def resolve(self, ds: xr.Dataset) -> Grid:
        """
        Locate the coordinate and elevation variables and build the grid.

        Raises:
            ResolutionError: a variable is missing or its layout is ambiguous
        """
        names = list(ds.variables)

        lat_name = find_variable(names, self.config.lat_names)
        if lat_name is None:
            raise ResolutionError(
                f"No latitude variable found; tried {list(self.config.lat_names)} "
                f"among {names}"
            )
        lon_name = find_variable(names, self.config.lon_names)
        if lon_name is None:
            raise ResolutionError(
                f"No longitude variable found; tried {list(self.config.lon_names)} "
                f"among {names}"
            )

        lat_var = ds.variables[lat_name]
        lon_var = ds.variables[lon_name]
        if lat_var.ndim == 0 or lon_var.ndim == 0:
            raise ResolutionError(
                f"Coordinate variables '{lat_name}' and '{lon_name}' must have dimensions"
            )

        lat_dim = lat_var.dims[0]
        lon_dim = lon_var.dims[-1]
        n_lat = int(ds.sizes[lat_dim])
        n_lon = int(ds.sizes[lon_dim])
        print(f"Latitude: '{lat_name}' along '{lat_dim}' ({n_lat} values)")
        print(f"Longitude: '{lon_name}' along '{lon_dim}' ({n_lon} values)")

        elev_name = self._find_elevation(ds, names, (lat_name, lon_name), lat_dim, lon_dim)
        elev_var = ds.variables[elev_name]
        print(f"Elevation: '{elev_name}' with dimensions "
              f"{dict(zip(elev_var.dims, elev_var.shape))}")

        elevation = self.reshape_elevation(
            elev_var.values,
            elev_var.dims,
            [ds.sizes[d] for d in elev_var.dims],
            lat_dim, lon_dim, n_lat, n_lon,
            variable=elev_name,
        )
        n_rows, n_cols = elevation.shape

        lat = _values_along(lat_var, lat_dim)
        lon = _values_along(lon_var, lon_dim)
        if lat.size < n_rows or lon.size < n_cols:
            raise ResolutionError(
                f"Coordinate variables have {lat.size} lat / {lon.size} lon values "
                f"but '{elev_name}' resolves to a {n_rows}x{n_cols} grid"
            )

        return Grid(lat=lat[:n_rows], lon=lon[:n_cols], elevation=elevation)

    def _find_elevation(self, ds, names, coord_names, lat_dim, lon_dim) -> str:
        override = self.config.elevation_variable
        if override:
            match = find_variable(names, [override])
            if match is None:
                raise ResolutionError(
                    f"Configured elevation variable '{override}' not found among {names}"
                )
            return match

        candidates = [n for n in names if n not in coord_names]
        match = find_variable(candidates, self.config.elevation_names)
        if match is not None:
            return match

        for name in candidates:
            if {lat_dim, lon_dim} <= set(ds.variables[name].dims):
                print(f"Warning: no elevation name matched, using '{name}'")
                return name

        raise ResolutionError(
            f"No elevation variable found; tried {list(self.config.elevation_names)} "
            f"and no variable spans both '{lat_dim}' and '{lon_dim}'"
        )

    @staticmethod
    def reshape_elevation(values,
                          dims: Sequence[str],
                          sizes: Sequence[int],
                          lat_dim: str,
                          lon_dim: str,
                          n_lat: int,
                          n_lon: int,
                          variable: str = "elevation") -> np.ndarray:
        """
        Turn a raw variable buffer into a [lat][lon] array.

        Returns:
            2D float64 array in canonical order
        """
        flat = np.asarray(values, dtype=np.float64).ravel()
        flat, dims, sizes = strip_degenerate_axes(flat, dims, sizes, keep=(lat_dim, lon_dim))

        if len(dims) != 2:
            raise ResolutionError(
                f"Cannot interpret dimension order of '{variable}': "
                f"{len(dims)} non-degenerate dimension(s) {tuple(dims)} remain, expected 2"
            )

        expected = sizes[0] * sizes[1]
        if flat.size < expected:
            raise ResolutionError(
                f"'{variable}' holds {flat.size} values, "
                f"dimensions {tuple(dims)} need {expected}"
            )

        lon_major = infer_lon_major(dims, sizes, lat_dim, lon_dim, n_lat, n_lon)
        grid = flat[:expected].reshape(sizes[0], sizes[1])
        if lon_major:
            grid = grid.T
        return np.ascontiguousarray(grid)


def load_grid(source: Union[str, Path, Mapping, xr.Dataset],
              config: Optional[SourceConfig] = None) -> Grid:
    """
    Load a Grid from a JSON/netCDF path, a JSON-like mapping or a Dataset.
    """
    if isinstance(source, xr.Dataset):
        return GridSourceResolver(config).resolve(source)

    if isinstance(source, Mapping):
        return grid_from_json(source)

    path = Path(source)
    suffix = path.suffix.lower()

    print(f"Reading {suffix} file: {path.name}")

    if suffix == '.json':
        return read_json_grid(path)

    elif suffix in NETCDF_SUFFIXES:
        with xr.open_dataset(path) as ds:
            return GridSourceResolver(config).resolve(ds)

    else:
        raise ValueError(f"Unsupported grid format: {suffix}")
