"""ResiLinked backend API."""
