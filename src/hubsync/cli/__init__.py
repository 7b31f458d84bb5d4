"""hubsync command-line interface."""
