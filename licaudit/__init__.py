"""License classification and compliance auditing for source trees."""

__version__ = "0.3.0"

__all__ = ["__version__"]
