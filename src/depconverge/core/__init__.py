"""Core engine: dependency convergence, loaders and the lock mapping."""
