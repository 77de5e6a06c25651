"""Adapters around programs and files outside the core model."""
