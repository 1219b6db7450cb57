"""Shared helpers used across Pushdeploy packages."""
