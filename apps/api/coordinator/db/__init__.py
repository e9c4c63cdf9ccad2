"""Database base, session, types, enums, and models."""
