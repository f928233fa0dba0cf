"""Core infrastructure: configuration, logging, workflow definition, ledger."""
