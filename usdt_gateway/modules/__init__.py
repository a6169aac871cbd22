"""Domain modules: orders (allocation), wallets (address pool), reconciliation."""
