"""Core types, configuration and event plumbing."""
