"""Storage providers for uploaded dumps."""
