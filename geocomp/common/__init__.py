"""Shared helpers used across geocomp packages."""
