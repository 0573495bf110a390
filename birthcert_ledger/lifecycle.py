"""
Record lifecycle: creation and update of birth certificates.

Enforces the write invariants:
- every caller-supplied field is non-empty
- a record is created only when its key holds no live version
- an update requires a live version and never changes ``id`` or ``userName``
- each successful call appends exactly one version
"""

from __future__ import annotations

import logging

from .codec import RecordCodec
from .exceptions import ConflictError, NotFoundError
from .models import DOC_TYPE, MUTABLE_FIELDS, UPDATE_FIELDS, BirthCertificate, validate_fields
from .store.base import VersionedStateStore

logger = logging.getLogger(__name__)


class RecordLifecycleManager:
    """Creates and updates birth certificates on a versioned store."""

    def __init__(self, store: VersionedStateStore, codec: RecordCodec | None = None) -> None:
        self.store = store
        self.codec = codec or RecordCodec()

    async def create(
        self,
        record_id: str,
        *,
        user_name: str,
        name: str,
        father_name: str,
        mother_name: str,
        dob: str,
        gender: str,
        weight: str,
        country: str,
        state: str,
        city: str,
        hospital_name: str,
        permanent_address: str,
    ) -> str:
        """Create a new birth certificate.

        Args:
            record_id: Unique key for the certificate
            user_name: Owning user, fixed for the life of the record
            name: Name of the registered individual
            father_name: Father's name
            mother_name: Mother's name
            dob: Date of birth, ``YYYY-MM-DD``
            gender: Gender
            weight: Birth weight
            country: Country of birth
            state: State of birth
            city: City of birth
            hospital_name: Hospital of birth
            permanent_address: Permanent address

        Returns:
            ID of the transaction that wrote the record

        Raises:
            ValidationError: If any field is empty
            ConflictError: If the key already holds a live version
        """
        certificate = BirthCertificate.from_fields(
            {
                "id": record_id,
                "userName": user_name,
                "name": name,
                "fatherName": father_name,
                "motherName": mother_name,
                "dob": dob,
                "gender": gender,
                "weight": weight,
                "country": country,
                "state": state,
                "city": city,
                "hospitalName": hospital_name,
                "permanentAddress": permanent_address,
            }
        )

        async with self.store.transaction():
            existing = await self.store.get(record_id)
            if existing:
                raise ConflictError(record_id)

            await self.store.put(record_id, self.codec.encode(certificate.to_dict()))
            tx_id = self.store.current_transaction_id()

        logger.info(f"Birth certificate created with transaction ID: {tx_id}")
        return tx_id

    async def update(
        self,
        record_id: str,
        *,
        name: str,
        father_name: str,
        mother_name: str,
        dob: str,
        gender: str,
        weight: str,
        country: str,
        state: str,
        city: str,
        hospital_name: str,
        permanent_address: str,
    ) -> str:
        """Replace the mutable fields of an existing birth certificate.

        ``userName`` is not accepted; the stored owner is carried over.

        Returns:
            ID of the transaction that wrote the new version

        Raises:
            ValidationError: If any field is empty
            NotFoundError: If the key holds no live version
            DecodeError: If the current version is not a JSON document
        """
        values = {
            "id": record_id,
            "name": name,
            "fatherName": father_name,
            "motherName": mother_name,
            "dob": dob,
            "gender": gender,
            "weight": weight,
            "country": country,
            "state": state,
            "city": city,
            "hospitalName": hospital_name,
            "permanentAddress": permanent_address,
        }
        validate_fields(values, UPDATE_FIELDS)

        async with self.store.transaction():
            existing = await self.store.get(record_id)
            if not existing:
                raise NotFoundError(record_id)

            document = self.codec.decode(existing, record_id)
            for field_name in MUTABLE_FIELDS:
                document[field_name] = values[field_name]
            document["docType"] = DOC_TYPE

            await self.store.put(record_id, self.codec.encode(document))
            tx_id = self.store.current_transaction_id()

        logger.info(f"Birth certificate updated with transaction ID: {tx_id}")
        return tx_id
