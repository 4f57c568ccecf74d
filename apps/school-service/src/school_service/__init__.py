"""School locator HTTP service."""
