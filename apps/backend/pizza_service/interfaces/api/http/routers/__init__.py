"""Feature routers (auth, order, franchise, user, service)."""
