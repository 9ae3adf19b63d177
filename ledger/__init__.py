"""
Split-payment ledger.

Fans the proceeds of a paid sale out across beneficiary accounts and reverses
the liable portions on refund or chargeback. Every posting is guarded by a
unique reference id so that repeated webhook deliveries are no-ops.
"""
