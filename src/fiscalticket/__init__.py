"""Spanish fiscal burden calculator."""
