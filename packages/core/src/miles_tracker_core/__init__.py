"""Filter normalization and query construction for award flight data."""
