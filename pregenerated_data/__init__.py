"""Pre-generated color sets of 1 to 50 colors, one file per color generator."""
