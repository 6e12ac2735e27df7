from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Mapping

from ..common.datetime_utils import parse_iso, to_iso
from ..core.enums import Gender


def name_key(name: str) -> str:
    """Normalized form used for the (name, mobile) uniqueness rule."""
    return (name or "").strip().lower()


@dataclass(frozen=True)
class Client:
    """Domain entity: a consultancy client's contact, birth and billing data.

    Pure data object; no storage code. ``id`` is the public identifier and
    is independent of any storage key.
    """

    id: str
    name: str
    mobile: str
    dob: str
    birth_time: str
    dot: str
    gender: Gender
    email: str = ""
    address: str = ""
    problem_statement: str = ""
    chargeable_amount: float = 0.0
    paid_amount: float = 0.0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def name_key(self) -> str:
        return name_key(self.name)

    @property
    def remaining_amount(self) -> float:
        return self.chargeable_amount - self.paid_amount

    def with_fields(self, fields: "ClientFields", *, updated_at: datetime) -> "Client":
        """Full replace of the editable fields; ``id`` and ``created_at`` are kept."""
        return replace(self, **fields.as_kwargs(), updated_at=updated_at)

    def to_record(self) -> dict[str, Any]:
        """Persisted JSON shape (camelCase, no derived values)."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "address": self.address,
            "mobile": self.mobile,
            "dob": self.dob,
            "birthTime": self.birth_time,
            "dot": self.dot,
            "problemStatement": self.problem_statement,
            "gender": self.gender.value,
            "chargeableAmount": self.chargeable_amount,
            "paidAmount": self.paid_amount,
            "createdAt": to_iso(self.created_at) if self.created_at else None,
            "updatedAt": to_iso(self.updated_at) if self.updated_at else None,
        }

    def to_dict(self) -> dict[str, Any]:
        """API shape: the persisted fields plus the derived remaining amount."""
        data = self.to_record()
        data["remainingAmount"] = self.remaining_amount
        return data

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "Client":
        created = data.get("createdAt")
        updated = data.get("updatedAt")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            address=str(data.get("address") or ""),
            mobile=str(data.get("mobile") or ""),
            dob=str(data.get("dob") or ""),
            birth_time=str(data.get("birthTime") or ""),
            dot=str(data.get("dot") or ""),
            problem_statement=str(data.get("problemStatement") or ""),
            gender=Gender(data["gender"]),
            chargeable_amount=float(data.get("chargeableAmount") or 0),
            paid_amount=float(data.get("paidAmount") or 0),
            created_at=parse_iso(created) if created else None,
            updated_at=parse_iso(updated) if updated else None,
        )


@dataclass(frozen=True)
class ClientFields:
    """The editable part of a client, already validated and normalized."""

    name: str
    mobile: str
    dob: str
    birth_time: str
    dot: str
    gender: Gender
    email: str = ""
    address: str = ""
    problem_statement: str = ""
    chargeable_amount: float = 0.0
    paid_amount: float = 0.0

    def as_kwargs(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "mobile": self.mobile,
            "dob": self.dob,
            "birth_time": self.birth_time,
            "dot": self.dot,
            "gender": self.gender,
            "email": self.email,
            "address": self.address,
            "problem_statement": self.problem_statement,
            "chargeable_amount": self.chargeable_amount,
            "paid_amount": self.paid_amount,
        }

    def to_client(self, *, client_id: str, now: datetime) -> Client:
        return Client(id=client_id, created_at=now, updated_at=now, **self.as_kwargs())
