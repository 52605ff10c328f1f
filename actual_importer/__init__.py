"""Bank-to-Actual transaction importer package."""

__all__ = [
    "config",
    "data_loader",
    "client",
    "importer",
    "models",
    "bank",
    "exporter",
    "reports",
]

__version__ = "0.1.0"
