"""Indoor floor-plan map core — geometry, floor inference, map state."""
