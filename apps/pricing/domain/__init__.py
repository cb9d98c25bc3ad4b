"""Framework-free pricing domain: rate configuration, date classification, calculator."""
