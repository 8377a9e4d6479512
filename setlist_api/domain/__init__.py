"""Domain records and pure authorization rules."""
