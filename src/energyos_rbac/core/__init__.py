"""Core building blocks shared by the access-control features."""
