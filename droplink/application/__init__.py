"""Application services orchestrating the file-transfer workflows."""
