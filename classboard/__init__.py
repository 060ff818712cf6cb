"""Terminal client for the Première C class site."""
