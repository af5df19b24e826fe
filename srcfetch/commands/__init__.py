"""Click commands for the srcfetch CLI."""
