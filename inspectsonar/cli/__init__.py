"""CLI module for inspectsonar."""
