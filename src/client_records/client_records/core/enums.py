from __future__ import annotations

from enum import Enum


class Gender(str, Enum):
    """Allowed values for a client's gender, stored verbatim."""

    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class StorageBackend(str, Enum):
    MYSQL = "mysql"
    FILE = "file"


class SessionBackend(str, Enum):
    MEMORY = "memory"
    MYSQL = "mysql"
