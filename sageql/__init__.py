"""SageQL - natural language to validated, executed GraphQL queries."""

__version__ = "0.1.0"
