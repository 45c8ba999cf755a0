"""HTTP surface of the DropLink backend."""
