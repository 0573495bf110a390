"""Tests for RecordCodec and the record models."""

import json

import pytest

from birthcert_ledger.codec import RecordCodec
from birthcert_ledger.exceptions import DecodeError, ValidationError
from birthcert_ledger.models import (
    DOC_TYPE,
    RECORD_FIELDS,
    BirthCertificate,
    validate_fields,
)


@pytest.fixture
def codec() -> RecordCodec:
    return RecordCodec()


@pytest.fixture
def certificate() -> BirthCertificate:
    return BirthCertificate(
        id="BC001",
        user_name="alice",
        name="Bob Smith",
        father_name="John Smith",
        mother_name="Jane Smith",
        dob="2020-05-01",
        gender="male",
        weight="3.2kg",
        country="India",
        state="Karnataka",
        city="Bengaluru",
        hospital_name="City Hospital",
        permanent_address="12 MG Road",
    )


class TestRecordCodec:
    """Tests for RecordCodec."""

    def test_encode_is_deterministic(self, codec, certificate):
        """Encoding the same certificate twice gives identical bytes."""
        assert codec.encode(certificate.to_dict()) == codec.encode(certificate.to_dict())

    def test_encode_decode(self, codec, certificate):
        """Decoding encoded bytes gives back the document."""
        document = certificate.to_dict()
        assert codec.decode(codec.encode(document)) == document

    def test_encode_keeps_non_ascii(self, codec):
        """Non-ASCII text is stored as UTF-8, not escaped."""
        encoded = codec.encode({"city": "São Paulo"})
        assert "São Paulo".encode() in encoded

    def test_decode_rejects_invalid_json(self, codec):
        """Bytes that are not JSON raise DecodeError."""
        with pytest.raises(DecodeError) as exc_info:
            codec.decode(b"{oops", key="BC001")
        assert exc_info.value.key == "BC001"
        assert "BC001" in exc_info.value.message

    def test_decode_rejects_non_object(self, codec):
        """JSON values other than objects raise DecodeError."""
        with pytest.raises(DecodeError):
            codec.decode(b"[1, 2, 3]")

    def test_decode_rejects_invalid_utf8(self, codec):
        """Bytes that are not UTF-8 raise DecodeError."""
        with pytest.raises(DecodeError):
            codec.decode(b"\xff\xfe")

    def test_decode_lenient_falls_back_to_string(self, codec):
        """Lenient decoding returns the raw text instead of failing."""
        assert codec.decode_lenient(b"legacy record") == "legacy record"
        assert codec.decode_lenient(b'{"a": "b"}') == {"a": "b"}


class TestBirthCertificate:
    """Tests for BirthCertificate."""

    def test_to_dict_shape(self, certificate):
        """The stored document uses camelCase keys and omits the ID."""
        document = certificate.to_dict()
        assert document["docType"] == DOC_TYPE
        assert document["userName"] == "alice"
        assert "id" not in document
        assert set(document) == (set(RECORD_FIELDS) - {"id"}) | {"docType"}

    def test_from_dict_uses_store_key(self, certificate):
        """The record ID comes from the store key."""
        restored = BirthCertificate.from_dict(certificate.to_dict(), record_id="BC001")
        assert restored == certificate

    def test_to_dict_always_asserts_doc_type(self, certificate):
        """docType is always birthCert, whatever the attribute holds."""
        certificate.doc_type = "other"
        assert certificate.to_dict()["docType"] == DOC_TYPE

    def test_from_fields_validates(self):
        """Building from fields rejects an empty value."""
        with pytest.raises(ValidationError):
            BirthCertificate.from_fields({"id": "BC001"})

    def test_stored_document_is_json(self, codec, certificate):
        """Encoded certificates are plain JSON objects."""
        assert json.loads(codec.encode(certificate.to_dict()))["name"] == "Bob Smith"


class TestValidateFields:
    """Tests for validate_fields."""

    def test_reports_first_missing_field(self):
        """The error names the first empty field in order."""
        with pytest.raises(ValidationError) as exc_info:
            validate_fields({"a": "x", "b": ""}, ["a", "b", "c"])
        assert exc_info.value.field == "b"
        assert exc_info.value.details == {"field": "b", "reason": "All fields are required"}

    def test_whitespace_is_not_trimmed(self):
        """Whitespace-only values count as present."""
        validate_fields({"a": " "}, ["a"])
