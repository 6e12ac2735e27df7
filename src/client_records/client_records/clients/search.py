from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

from ..common.validators import clean_text
from .model import Client


@dataclass(frozen=True)
class SearchCriteria:
    """Optional, conjunctive filters for the client list.

    ``name`` and ``mobile`` are case-insensitive substrings, ``gender`` is
    exact, ``date`` matches either the birth date or the visit date.
    """

    name: Optional[str] = None
    mobile: Optional[str] = None
    gender: Optional[str] = None
    date: Optional[str] = None

    @classmethod
    def from_args(cls, args: Mapping[str, object]) -> "SearchCriteria":
        def _opt(key: str) -> Optional[str]:
            return clean_text(args.get(key)) or None

        return cls(name=_opt("name"), mobile=_opt("mobile"), gender=_opt("gender"), date=_opt("date"))

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.mobile or self.gender or self.date)

    def matches(self, client: Client) -> bool:
        if self.name and self.name.lower() not in client.name.lower():
            return False
        if self.mobile and self.mobile.lower() not in client.mobile.lower():
            return False
        if self.gender and client.gender.value != self.gender:
            return False
        if self.date and self.date not in (client.dob, client.dot):
            return False
        return True


def newest_first(clients: Iterable[Client]) -> list[Client]:
    # sorted() is stable with reverse=True, so equal timestamps keep store order.
    return sorted(clients, key=lambda c: c.created_at.timestamp() if c.created_at else 0.0, reverse=True)


def filter_clients(clients: Iterable[Client], criteria: SearchCriteria) -> Sequence[Client]:
    return newest_first(c for c in clients if criteria.matches(c))
