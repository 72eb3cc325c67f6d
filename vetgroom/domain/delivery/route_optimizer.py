"""
Delivery route optimizer.

Greedy capacitated routing: points are grouped by colonia, colonias are
visited by ascending weight (lower weight = higher priority), and inside each
colonia the van goes to the nearest remaining point until it is full, then a
new van route starts back at the clinic.
"""

import math
from dataclasses import dataclass
from typing import Optional

EARTH_RADIUS_KM = 6371.0
DEFAULT_COLONIA_WEIGHT = 5.0
MONTERREY_CENTER = (25.6866, -100.3161)
UNKNOWN_COLONIA = "unknown"

# Pets per van
VAN_CAPACITIES = {
    "small": 8,
    "medium": 15,
    "large": 25,
}

MINUTES_PER_KM = 3
MINUTES_PER_STOP = 5


@dataclass
class RoutePoint:
    id: int
    latitude: float
    longitude: float
    address: Optional[str] = None
    fraccionamiento: Optional[str] = None
    client_name: Optional[str] = None
    pet_name: Optional[str] = None
    pet_count: int = 1

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address": self.address,
            "fraccionamiento": self.fraccionamiento,
            "clientName": self.client_name,
            "petName": self.pet_name,
            "petCount": self.pet_count,
        }


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def solve_routes(
    clinic: tuple[float, float],
    points: list[RoutePoint],
    weights: dict[str, float],
    van_capacity: str = "medium",
) -> tuple[list[list[RoutePoint]], float]:
    """Returns (routes, total distance in km)"""
    max_pets = VAN_CAPACITIES[van_capacity]

    groups: dict[str, list[RoutePoint]] = {}
    for point in points:
        groups.setdefault(point.fraccionamiento or UNKNOWN_COLONIA, []).append(point)

    ordered = sorted(groups.items(), key=lambda g: weights.get(g[0], DEFAULT_COLONIA_WEIGHT))

    routes: list[list[RoutePoint]] = []
    total_distance = 0.0
    for _, group in ordered:
        remaining = list(group)
        current: list[RoutePoint] = []
        load = 0
        location = clinic

        while remaining:
            nearest, nearest_distance = None, math.inf
            for candidate in remaining:
                if load + candidate.pet_count > max_pets:
                    continue
                distance = haversine_km(location[0], location[1], candidate.latitude, candidate.longitude)
                if distance < nearest_distance:
                    nearest, nearest_distance = candidate, distance

            if nearest is None:
                if not current:
                    # A single stop larger than the van; nothing more fits
                    break
                routes.append(current)
                current, load, location = [], 0, clinic
                continue

            current.append(nearest)
            load += nearest.pet_count
            location = (nearest.latitude, nearest.longitude)
            total_distance += nearest_distance
            remaining.remove(nearest)

        if current:
            routes.append(current)

    return routes, total_distance


def optimize_delivery_route(
    clinic: tuple[float, float],
    points: list[RoutePoint],
    weights: dict[str, float],
    van_capacity: str = "medium",
) -> dict:
    routes, total_distance = solve_routes(clinic, points, weights, van_capacity)
    ordered_points = [p for route in routes for p in route]

    colonia_stats: dict[str, dict] = {}
    for point in ordered_points:
        name = point.fraccionamiento or UNKNOWN_COLONIA
        stats = colonia_stats.setdefault(
            name, {"name": name, "weight": weights.get(name, DEFAULT_COLONIA_WEIGHT), "stopCount": 0}
        )
        stats["stopCount"] += 1

    return {
        "points": [p.to_dict() for p in ordered_points],
        "totalDistance": round(total_distance, 2),
        "estimatedTime": round(total_distance * MINUTES_PER_KM + len(ordered_points) * MINUTES_PER_STOP),
        "efficiency": round(len(ordered_points) / len(routes), 2) if routes else 0,
        "routeSequence": [
            f"{p.client_name} - {p.pet_name} ({p.fraccionamiento or UNKNOWN_COLONIA})" for p in ordered_points
        ],
        "fraccionamientoOrder": sorted(colonia_stats.values(), key=lambda s: s["weight"]),
        "routes": [[p.id for p in route] for route in routes],
    }
