"""Public views of atmo.pics records: identity and content resolution."""

__version__ = "0.4.0"
