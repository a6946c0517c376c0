"""Core of the county explorer: geometry, region data and the interactive map engine."""
