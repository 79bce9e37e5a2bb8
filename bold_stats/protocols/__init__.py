"""Protocol-specific readers."""
