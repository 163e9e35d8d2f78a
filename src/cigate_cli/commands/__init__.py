"""cigate subcommands."""
