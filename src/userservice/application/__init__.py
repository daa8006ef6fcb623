"""Application layer: use cases orchestrating the domain against its ports."""
