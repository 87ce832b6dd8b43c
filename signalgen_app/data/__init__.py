"""Domain records, tick parsing and rolling digit history."""
