"""Tests for the error hierarchy and its frontend flattening"""

import pytest

from galynx.shared.exceptions import (
    ApiError,
    ApiErrorDto,
    ConfigurationError,
    HttpError,
    InvalidResponseError,
    NetworkError,
    RealtimeError,
    StorageError,
    UnauthenticatedError,
)


@pytest.mark.unit
def test_http_error_keeps_its_triple():
    dto = HttpError(404, "not_found", "Channel not found").to_dto()
    assert dto == ApiErrorDto(404, "not_found", "Channel not found")


@pytest.mark.unit
def test_unauthenticated_maps_to_sign_in_again():
    assert UnauthenticatedError().to_dto().to_dict() == {
        "status": 401,
        "error": "unauthorized",
        "message": "You must sign in again.",
    }


@pytest.mark.unit
@pytest.mark.parametrize(
    "err",
    [
        NetworkError("connection reset"),
        InvalidResponseError("missing field"),
        StorageError("disk full"),
        RealtimeError("bad url"),
    ],
)
def test_other_errors_map_to_internal_error(err):
    dto = ApiErrorDto.from_error(err)
    assert dto.status == 500
    assert dto.error == "internal_error"
    assert dto.message == str(err)


@pytest.mark.unit
def test_every_operation_error_is_an_api_error():
    for err in (
        NetworkError("x"),
        HttpError(500, "e", "m"),
        UnauthenticatedError(),
        InvalidResponseError("x"),
        StorageError("x"),
        RealtimeError("x"),
    ):
        assert isinstance(err, ApiError)


@pytest.mark.unit
def test_configuration_error_is_value_error():
    assert issubclass(ConfigurationError, ValueError)
    assert not issubclass(ConfigurationError, ApiError)
