"""APIService types, ordering and condition helpers, versioned models, a scheme registry and validation."""

__version__ = "0.1.0"