"""HTTP surface for the review core."""
