"""IrisOS — a simulated single-user operating system shell in Python."""
