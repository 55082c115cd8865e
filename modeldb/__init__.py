"""Model-oriented database access: pooled connections, SQL builders, record sets and loaders."""

__version__ = "0.1.0"

__all__ = [
    "config",
    "connection",
    "exceptions",
    "loader",
    "manager",
    "model",
    "recordset",
    "sqlbuilder",
    "storedproc",
]