"""ImpactPlane CLI."""
