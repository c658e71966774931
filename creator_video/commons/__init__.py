"""Commons package - settings, telemetry and storage building blocks."""
