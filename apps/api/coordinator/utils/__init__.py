"""Pure date and time helpers."""
