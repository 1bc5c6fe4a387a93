"""Version information for energyos-rbac."""

__version__ = "1.0.0"
