"""Model provider clients."""
