"""Feature modules for energyos-rbac."""
