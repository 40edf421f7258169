"""Concourse resource that manages a GitHub repository webhook."""
__version__ = "0.1.0"
