from __future__ import annotations

from typing import Any, Mapping

from ..common.validators import clean_text, parse_amount
from ..core.constants import AMOUNT_DECIMALS, MAX_AMOUNT
from ..core.enums import Gender
from ..core.exceptions import ValidationError
from .model import ClientFields

# (request key, human label) in the order they are reported.
REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("name", "Name"),
    ("gender", "Gender"),
    ("mobile", "Mobile Number"),
    ("dob", "Date of Birth"),
    ("birthTime", "Birth Time"),
    ("dot", "Date of Visit"),
)

AMOUNT_FIELDS: tuple[str, ...] = ("chargeableAmount", "paidAmount")


def parse_client_input(data: Mapping[str, Any] | None) -> ClientFields:
    """Map a loosely-typed request body to validated :class:`ClientFields`.

    Every blank required field is collected before failing, so the operator
    sees the whole list at once. Invalid values (unknown gender, bad or
    negative amounts) are reported only once nothing is missing.
    """
    data = data or {}
    values = {key: clean_text(data.get(key)) for key, _ in REQUIRED_FIELDS}

    missing = [key for key, _ in REQUIRED_FIELDS if not values[key]]
    if missing:
        labels = [label for key, label in REQUIRED_FIELDS if key in missing]
        raise ValidationError(f"Required fields missing: {', '.join(labels)}", missing_fields=missing)

    invalid: list[str] = []
    problems: list[str] = []

    try:
        gender = Gender(values["gender"])
    except ValueError:
        gender = None
        invalid.append("gender")
        problems.append(f"Gender must be one of {', '.join(g.value for g in Gender)}")

    amounts: dict[str, float] = {}
    for key in AMOUNT_FIELDS:
        amount = parse_amount(data.get(key))
        if amount is None:
            invalid.append(key)
            problems.append(f"{key} must be a number")
        elif amount < 0:
            invalid.append(key)
            problems.append(f"{key} cannot be negative")
        elif amount > MAX_AMOUNT:
            invalid.append(key)
            problems.append(f"{key} cannot exceed {MAX_AMOUNT:.2f}")
        elif round(amount, AMOUNT_DECIMALS) != amount:
            invalid.append(key)
            problems.append(f"{key} must have at most {AMOUNT_DECIMALS} decimal places")
        else:
            amounts[key] = amount

    if invalid:
        raise ValidationError("; ".join(problems), invalid_fields=invalid)

    return ClientFields(
        name=values["name"],
        gender=gender,
        mobile=values["mobile"],
        dob=values["dob"],
        birth_time=values["birthTime"],
        dot=values["dot"],
        email=clean_text(data.get("email")).lower(),
        address=clean_text(data.get("address")),
        problem_statement=clean_text(data.get("problemStatement")),
        chargeable_amount=amounts["chargeableAmount"],
        paid_amount=amounts["paidAmount"],
    )
