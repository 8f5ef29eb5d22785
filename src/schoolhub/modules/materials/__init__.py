"""Course materials."""
