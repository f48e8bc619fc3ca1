"""App and package scaffolding."""
