"""Shared helpers for logging, environment access and owner tokens."""
