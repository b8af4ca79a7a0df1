import json
import re
from datetime import UTC, datetime
from typing import Any

from shapely import wkt
from shapely.errors import ShapelyError
from shapely.geometry import Point, Polygon, box, shape
from shapely.geometry.base import BaseGeometry

from geotasker.core.errors import InvalidRequestError

# roughly 100m at the equator
POINT_BUFFER_DEGREES = 0.001

_LAT_LNG_PATTERN = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")


def geojson_to_shapely(geojson: dict) -> BaseGeometry:
    """converts geojson to shapely object"""
    return shape(geojson)


def point_to_polygon(lon: float, lat: float) -> Polygon:
    if not (-180 <= lon <= 180):
        raise InvalidRequestError(f"Longitude {lon} out of range [-180, 180]")
    if not (-90 <= lat <= 90):
        raise InvalidRequestError(f"Latitude {lat} out of range [-90, 90]")
    return box(
        lon - POINT_BUFFER_DEGREES,
        lat - POINT_BUFFER_DEGREES,
        lon + POINT_BUFFER_DEGREES,
        lat + POINT_BUFFER_DEGREES,
    )


def to_wkt(location: str | dict[str, Any]) -> str:
    """
    Normalize a location into the WKT POLYGON the vendor API expects.

    Accepts a WKT string (POLYGON or POINT), a "lat,lng" coordinate string,
    a GeoJSON Point/Polygon object or the same object serialized as a string.
    Points become a small square around the coordinate.

    Raises:
        InvalidRequestError: If the location cannot be parsed
    """
    geometry = _parse_geometry(location)
    if isinstance(geometry, Point):
        geometry = point_to_polygon(geometry.x, geometry.y)
    if not isinstance(geometry, Polygon):
        raise InvalidRequestError(
            f"Unsupported geometry type {geometry.geom_type}, use a Point or Polygon"
        )
    if geometry.is_empty:
        raise InvalidRequestError("Location geometry is empty")
    return geometry.wkt


def _parse_geometry(location: str | dict[str, Any]) -> BaseGeometry:
    if isinstance(location, dict):
        return _geojson_to_geometry(location)

    text = location.strip() if isinstance(location, str) else ""
    if not text:
        raise InvalidRequestError("Location is required")

    match = _LAT_LNG_PATTERN.match(text)
    if match:
        lat, lng = float(match.group(1)), float(match.group(2))
        return point_to_polygon(lng, lat)

    if text.startswith("{"):
        try:
            return _geojson_to_geometry(json.loads(text))
        except json.JSONDecodeError as e:
            raise InvalidRequestError(f"Invalid GeoJSON location: {e}") from e

    try:
        return wkt.loads(text)
    except ShapelyError as e:
        raise InvalidRequestError(
            f'Invalid location format: "{location}". '
            "Use WKT, 'lat,lng' or a GeoJSON Point/Polygon"
        ) from e


def _geojson_to_geometry(geojson: dict[str, Any]) -> BaseGeometry:
    if geojson.get("type") not in ("Point", "Polygon"):
        raise InvalidRequestError(
            f"Unsupported GeoJSON type: {geojson.get('type')!r}, use Point or Polygon"
        )
    try:
        return geojson_to_shapely(geojson)
    except (ShapelyError, ValueError, TypeError, KeyError, IndexError) as e:
        raise InvalidRequestError(f"Invalid GeoJSON geometry: {e}") from e


def parse_datetime(value: str) -> datetime:
    """Parse an ISO 8601 date or datetime, assuming UTC when no offset is given."""
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (ValueError, AttributeError) as e:
        raise InvalidRequestError(f'Invalid date: "{value}"') from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def to_iso_datetime(value: str) -> str:
    return parse_datetime(value).isoformat()
