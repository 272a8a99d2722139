"""Geographic constants for location resolution.

This module contains the built-in gazetteer of Libyan cities, grouped by
the four administrative regions used across the marketplace, and the
country bounds used to sanity-check device readings.
"""

WESTERN = "Western Region"
CENTRAL = "Central Region"
EASTERN = "Eastern Region"
SOUTHERN = "Southern Region"

# (name, region, latitude, longitude)
LIBYAN_CITIES: list[tuple[str, str, float, float]] = [
    # Western region
    ("Tripoli", WESTERN, 32.8872, 13.1913),
    ("Zawiya", WESTERN, 32.7571, 12.7278),
    ("Sabratha", WESTERN, 32.7933, 12.4885),
    ("Zuwara", WESTERN, 32.9312, 12.0819),
    ("Gharyan", WESTERN, 32.1722, 13.0203),
    ("Khoms", WESTERN, 32.6486, 14.2619),
    ("Zliten", WESTERN, 32.4674, 14.5687),
    ("Nalut", WESTERN, 31.8685, 10.9812),
    ("Ghadames", WESTERN, 30.1337, 9.5007),
    # Central region
    ("Misrata", CENTRAL, 32.3754, 15.0925),
    ("Bani Walid", CENTRAL, 31.7566, 13.9942),
    ("Sirte", CENTRAL, 31.2089, 16.5887),
    ("Hun", CENTRAL, 29.1268, 15.9477),
    # Eastern region
    ("Benghazi", EASTERN, 32.1165, 20.0686),
    ("Al Marj", EASTERN, 32.4932, 20.8297),
    ("Bayda", EASTERN, 32.7627, 21.7551),
    ("Derna", EASTERN, 32.7670, 22.6367),
    ("Tobruk", EASTERN, 32.0836, 23.9764),
    ("Ajdabiya", EASTERN, 30.7554, 20.2263),
    ("Jalu", EASTERN, 29.0331, 21.5482),
    # Southern region
    ("Sabha", SOUTHERN, 27.0377, 14.4283),
    ("Brak", SOUTHERN, 27.5496, 14.2714),
    ("Ubari", SOUTHERN, 26.5903, 12.7752),
    ("Murzuq", SOUTHERN, 25.9155, 13.9184),
    ("Ghat", SOUTHERN, 24.9647, 10.1728),
    ("Kufra", SOUTHERN, 24.1997, 23.2906),
]

# Country bounds, used to flag readings that cannot belong to the gazetteer
LIBYA_BOUNDS = {
    "min_lat": 19.5,
    "max_lat": 33.2,
    "min_lon": 9.3,
    "max_lon": 25.2,
}
