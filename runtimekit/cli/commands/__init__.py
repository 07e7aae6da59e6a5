"""CLI command implementations, one module per command exposing run(args)."""
