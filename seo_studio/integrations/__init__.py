"""Clients for third-party search data APIs."""
