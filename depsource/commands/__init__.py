"""Click subcommands of the depsource CLI."""
