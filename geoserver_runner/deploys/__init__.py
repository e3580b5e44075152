"""Provisioning steps for the managed GeoServer install."""
