"""Provision and run a GeoServer instance with GeoMesa plugins."""

__version__ = "5.3.0.dev0"
