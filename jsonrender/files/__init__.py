"""Input file-set resolution and output path derivation."""
