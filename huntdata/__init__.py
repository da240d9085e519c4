"""Static hunt reference data for the Turtle scout client.

Loads the Turtle dataset (mobs and maps per patch), resolves local game names
into ids through caller supplied resolvers, and answers nearest spawn point
queries against the resulting read-only tables.
"""
