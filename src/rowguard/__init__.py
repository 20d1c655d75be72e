"""Row- and field-level access control for SQL queries."""

__version__ = "0.1.0"
