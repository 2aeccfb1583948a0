"""Job submission and polling services for the baby generator API."""
