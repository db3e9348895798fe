"""Request handlers for the edge function."""
