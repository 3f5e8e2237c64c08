"""Concrete strategy implementations."""
