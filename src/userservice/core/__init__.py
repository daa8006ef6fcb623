"""Core cross-cutting concerns: configuration and logging."""
