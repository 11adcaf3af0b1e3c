"""PropertyHub: real-estate listing marketplace API."""

__version__ = "1.0.0"
