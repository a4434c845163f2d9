"""Infrastructure: template tree access, caching, backups and the Kit."""
