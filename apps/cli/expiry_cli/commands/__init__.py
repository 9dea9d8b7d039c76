"""Flag expiry CLI commands package.

- run: Enumerate flags and write missing expiry dates
- dates: Date helpers (today, check-date)
"""
