"""Output rendering for the CLI (rich for humans, JSON for machines)."""
