"""Relational persistence for accounts."""
