"""Mock server implementations."""
