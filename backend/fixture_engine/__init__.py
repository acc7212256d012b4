"""Fixture generation engine for league, group/knockout and two-legged tournaments."""

__version__ = "1.0.0"
