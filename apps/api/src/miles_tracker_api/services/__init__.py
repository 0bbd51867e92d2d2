"""Business logic services backing the HTTP routers."""
