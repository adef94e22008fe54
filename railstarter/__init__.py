"""railstarter — opinionated starter setup for Rails applications."""

__version__ = "0.1.0"
