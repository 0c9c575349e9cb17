"""HTTP middlewares for request correlation and logging context."""
