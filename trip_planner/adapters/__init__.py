"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the application to external systems like:
- Geocoding services (Nominatim)
- Language models (OpenAI-compatible endpoints)
- Travel data (Overpass, OSRM, Open-Meteo, Wikivoyage)
- Session storage (in-memory)
- Caching systems (in-memory, null)
"""
