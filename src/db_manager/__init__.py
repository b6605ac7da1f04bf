"""DB Manager - provision and control database containers on the local Docker daemon."""

__version__ = "0.1.0"
