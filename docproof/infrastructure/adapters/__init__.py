"""Adapters implementing application ports against real systems."""
