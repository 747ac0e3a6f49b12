"""Infrastructure adapters: database, email and scheduling."""
