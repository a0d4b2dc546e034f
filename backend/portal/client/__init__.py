"""Polling client for the admin notification feed."""
