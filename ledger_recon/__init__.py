"""Account ledger reconciliation and balance engine."""
