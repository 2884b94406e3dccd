"""
Geocoding for the creation wizard's start and finish cities.
"""

from .geocoder import Geocoder, NominatimGeocoder, resolve_city

__all__ = [
    "Geocoder",
    "NominatimGeocoder",
    "resolve_city",
]
