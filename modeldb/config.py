"""Credentials used to reach a datasource."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class DatasourceConfig:
    """Name and credentials of an ODBC datasource."""

    name: str
    username: str
    password: str

    def update(self, name: str, username: str, password: str) -> None:
        """Replace every field in place, so holders of this object see the change."""
        self.name = name
        self.username = username
        self.password = password