"""Maintenance job coordination engine."""
