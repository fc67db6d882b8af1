"""HTTP API for the rental payment ledger."""
