"""
Record types for the birth certificate ledger.

A birth certificate is stored as a JSON document keyed by its ID.
The ID itself is the store key and is never part of the stored body.
Every stored document carries the ``docType`` discriminator so queries
can be scoped to birth certificates in a store shared with other kinds.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .exceptions import ValidationError

DOC_TYPE = "birthCert"

# Caller-supplied fields in contract order
RECORD_FIELDS = (
    "id",
    "userName",
    "name",
    "fatherName",
    "motherName",
    "dob",
    "gender",
    "weight",
    "country",
    "state",
    "city",
    "hospitalName",
    "permanentAddress",
)

# userName is fixed at creation
UPDATE_FIELDS = tuple(f for f in RECORD_FIELDS if f != "userName")

# Fields an update overwrites on the stored document
MUTABLE_FIELDS = tuple(f for f in UPDATE_FIELDS if f != "id")

# Python keyword argument for each stored field
FIELD_ARGUMENTS = {
    "userName": "user_name",
    "name": "name",
    "fatherName": "father_name",
    "motherName": "mother_name",
    "dob": "dob",
    "gender": "gender",
    "weight": "weight",
    "country": "country",
    "state": "state",
    "city": "city",
    "hospitalName": "hospital_name",
    "permanentAddress": "permanent_address",
}

CREATE_ARGUMENTS = tuple(FIELD_ARGUMENTS.values())
UPDATE_ARGUMENTS = tuple(FIELD_ARGUMENTS[f] for f in MUTABLE_FIELDS)


def validate_fields(values: Mapping[str, Any], required: Iterable[str]) -> None:
    """Check that every required field is present and non-empty.

    Empty means falsy; values are not trimmed.

    Raises:
        ValidationError: Naming the first missing field
    """
    for name in required:
        if not values.get(name):
            raise ValidationError(name, "All fields are required")


@dataclass
class BirthCertificate:
    """A birth certificate as persisted on the ledger.

    Attributes:
        id: Store key, unique among live records
        user_name: Owning user, immutable after creation
        name: Name of the registered individual
        father_name: Father's name
        mother_name: Mother's name
        dob: Date of birth, ``YYYY-MM-DD`` (not validated)
        gender: Free-form gender
        weight: Free-form birth weight
        country: Country of birth
        state: State of birth
        city: City of birth
        hospital_name: Hospital of birth
        permanent_address: Permanent address
        doc_type: Discriminator, always ``birthCert``
    """

    id: str
    user_name: str
    name: str
    father_name: str
    mother_name: str
    dob: str
    gender: str
    weight: str
    country: str
    state: str
    city: str
    hospital_name: str
    permanent_address: str
    doc_type: str = DOC_TYPE

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored document shape (without the key)."""
        return {
            "name": self.name,
            "userName": self.user_name,
            "fatherName": self.father_name,
            "motherName": self.mother_name,
            "dob": self.dob,
            "gender": self.gender,
            "weight": self.weight,
            "country": self.country,
            "state": self.state,
            "city": self.city,
            "hospitalName": self.hospital_name,
            "permanentAddress": self.permanent_address,
            "docType": DOC_TYPE,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], record_id: str | None = None) -> BirthCertificate:
        """Deserialize from a stored document.

        Args:
            data: Stored document
            record_id: Store key; falls back to an ``id`` entry in the document
        """
        return cls(
            id=record_id if record_id is not None else data.get("id", ""),
            user_name=data["userName"],
            name=data["name"],
            father_name=data["fatherName"],
            mother_name=data["motherName"],
            dob=data["dob"],
            gender=data["gender"],
            weight=data["weight"],
            country=data["country"],
            state=data["state"],
            city=data["city"],
            hospital_name=data["hospitalName"],
            permanent_address=data["permanentAddress"],
            doc_type=data.get("docType", DOC_TYPE),
        )

    @classmethod
    def from_fields(cls, values: Mapping[str, Any]) -> BirthCertificate:
        """Build from contract field names (camelCase) after validation."""
        validate_fields(values, RECORD_FIELDS)
        return cls.from_dict(dict(values), record_id=values["id"])


@dataclass
class QueryResult:
    """A single query hit: the store key and its decoded document.

    ``record`` is the raw payload string when it could not be decoded.
    """

    key: str
    record: dict[str, Any] | str

    def to_dict(self) -> dict[str, Any]:
        return {"Key": self.key, "Record": self.record}


@dataclass
class HistoryEntry:
    """Point-in-time snapshot of a key from the store's version log."""

    tx_id: str
    timestamp: datetime
    is_delete: bool
    data: dict[str, Any] | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "txId": self.tx_id,
            "timestamp": self.timestamp.isoformat(),
            "isDelete": self.is_delete,
            "data": self.data,
        }
