"""Concrete collaborators for the core ports (config, storage, mail, HTML)."""
