"""GeoJSON helpers for booking locations and zone geometry

Coordinates are stored longitude first, per GeoJSON, while the API speaks
{lat, lng}.
"""

import json


def encode_geo_point(lat: float, lng: float) -> str:
    """Serialize a lat/lng pair as a GeoJSON Point string"""
    return json.dumps({"type": "Point", "coordinates": [lng, lat]}, separators=(",", ":"))


def decode_geo_point(value: str) -> dict:
    """Parse a stored GeoJSON Point string back into {"lat", "lng"}"""
    try:
        data = json.loads(value)
    except (TypeError, json.JSONDecodeError) as e:
        raise ValueError(f"geo_point is not valid JSON: {e}") from None

    if not isinstance(data, dict) or data.get("type") != "Point":
        raise ValueError("geo_point must be a GeoJSON Point")

    coordinates = data.get("coordinates")
    if not isinstance(coordinates, list) or len(coordinates) != 2:
        raise ValueError("geo_point coordinates must be [lng, lat]")

    lng, lat = coordinates
    return {"lat": float(lat), "lng": float(lng)}


def _check_position(position) -> None:
    if not isinstance(position, list) or len(position) < 2:
        raise ValueError("each position must be [lng, lat]")
    lng, lat = position[0], position[1]
    if not isinstance(lng, (int, float)) or not isinstance(lat, (int, float)):
        raise ValueError("coordinates must be numbers")
    if not -180 <= lng <= 180 or not -90 <= lat <= 90:
        raise ValueError("coordinates out of range")


def parse_zone_geometry(value: str) -> dict:
    """
    Validate a zone geometry descriptor.

    Accepts a GeoJSON Point (zone center) or Polygon (zone boundary, rings
    closed and at least four positions long).

    Returns:
        The parsed GeoJSON object

    Raises:
        ValueError: If the descriptor is not a usable Point or Polygon
    """
    try:
        data = json.loads(value)
    except (TypeError, json.JSONDecodeError) as e:
        raise ValueError(f"geometry is not valid JSON: {e}") from None

    if not isinstance(data, dict):
        raise ValueError("geometry must be a GeoJSON object")

    geometry_type = data.get("type")
    coordinates = data.get("coordinates")

    if geometry_type == "Point":
        _check_position(coordinates)
    elif geometry_type == "Polygon":
        if not isinstance(coordinates, list) or not coordinates:
            raise ValueError("polygon must contain at least one ring")
        for ring in coordinates:
            if not isinstance(ring, list) or len(ring) < 4:
                raise ValueError("polygon rings need at least four positions")
            for position in ring:
                _check_position(position)
            if ring[0] != ring[-1]:
                raise ValueError("polygon rings must be closed")
    else:
        raise ValueError("geometry type must be Point or Polygon")

    return data
