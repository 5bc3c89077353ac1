"""Admin backend for the community-services app."""

__version__ = "1.0.0"
