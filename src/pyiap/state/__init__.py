"""Entitlement state layer.

This package is the local source of truth for per-tier expiration dates
between receipt verifications.
"""
