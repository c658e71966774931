"""Infrastructure layer - repositories, event publishing and wiring."""
