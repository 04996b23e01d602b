"""Registry clients: one ``list_versions(name)`` function per ecosystem."""
