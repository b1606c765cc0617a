"""Graph construction, metrics, and filtering."""
