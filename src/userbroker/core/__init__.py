"""Core domain types, errors, and interfaces."""
