"""HTTP API for the Miles Tracker award flight store."""
