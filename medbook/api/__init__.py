"""HTTP layer: routers, exception handlers and middleware."""
