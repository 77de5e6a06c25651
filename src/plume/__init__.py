"""Plume: stable-address static site builder."""

__version__ = "0.1.0"
