"""Infrastructure building blocks shared across layers."""
