"""Data models shared across rulecraft."""
