"""Ledger domain: entities, store interfaces, pricing and stock rules, errors."""
