"""Logging setup and notice log persistence."""
