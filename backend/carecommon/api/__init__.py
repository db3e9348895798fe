"""HTTP routes for the edge function app."""
