"""Thin per-resource wrappers over the Certfix API."""
