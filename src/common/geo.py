"""Geospatial helpers for grid-based progress tracking."""

from __future__ import annotations

import math

from .models import CellBounds, CellId, Position

METERS_PER_DEGREE = 111_320.0  # Equatorial approximation, no latitude correction


class InvalidCoordinateError(ValueError):
    """Raised when a latitude/longitude pair is not a valid coordinate."""


def validate_coordinates(latitude: float, longitude: float) -> None:
    if latitude is None or longitude is None:
        raise InvalidCoordinateError("Latitude and longitude must be provided for grid bucketing.")
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise InvalidCoordinateError(f"Non-finite coordinate ({latitude}, {longitude}).")
    if not -90.0 <= latitude <= 90.0:
        raise InvalidCoordinateError(f"Latitude {latitude} outside [-90, 90].")
    if not -180.0 <= longitude <= 180.0:
        raise InvalidCoordinateError(f"Longitude {longitude} outside [-180, 180].")


class GridGeometry:
    """Maps latitude/longitude pairs into deterministic square cells."""

    def __init__(self, cell_size_meters: float = 1000.0) -> None:
        if cell_size_meters <= 0:
            raise ValueError("cell_size_meters must be positive.")
        self.cell_size_meters = float(cell_size_meters)
        self.cell_size_degrees = self.cell_size_meters / METERS_PER_DEGREE

    def cell_id_for(self, latitude: float, longitude: float) -> CellId:
        validate_coordinates(latitude, longitude)
        lat_index = math.floor(latitude / self.cell_size_degrees)
        lng_index = math.floor(longitude / self.cell_size_degrees)
        return CellId(lat_index=lat_index, lng_index=lng_index)

    def cell_bounds(self, cell_id: CellId) -> CellBounds:
        size = self.cell_size_degrees
        return CellBounds(
            south=cell_id.lat_index * size,
            north=(cell_id.lat_index + 1) * size,
            west=cell_id.lng_index * size,
            east=(cell_id.lng_index + 1) * size,
        )

    def cell_center(self, cell_id: CellId) -> Position:
        bounds = self.cell_bounds(cell_id)
        return Position(
            latitude=(bounds.north + bounds.south) / 2,
            longitude=(bounds.east + bounds.west) / 2,
        )
