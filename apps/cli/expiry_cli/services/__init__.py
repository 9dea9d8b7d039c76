"""Output services for the flag expiry CLI (console report, action outputs)."""
