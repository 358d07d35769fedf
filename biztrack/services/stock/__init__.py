"""Stock ledger and reconciliation hooks"""
