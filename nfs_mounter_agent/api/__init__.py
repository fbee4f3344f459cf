"""HTTP surface — health routes and the app factory."""
