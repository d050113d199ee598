"""Core search and ranking logic."""
