"""Common building blocks for the cigate core: errors and process execution."""
