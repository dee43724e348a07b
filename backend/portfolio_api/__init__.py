"""HTTP surface for the portfolio engine."""
