"""Adapters for the remote services and local credential storage."""
