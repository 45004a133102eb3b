"""Request Validation — path identifier checks that reject before any storage access.

Invariants:
    - clientId must be a UUID, id must be a CUID; otherwise RequestValidationError
      with loc ("path", <name>) and a human message, rendered as 400 by error_handlers
    - Valid client ids are lower-cased so lookups are case-insensitive
"""

from typing import Annotated

from fastapi import Path
from fastapi.exceptions import RequestValidationError

from diagnosis_api.core.domain_types import ClientId, DiagnosisId
from diagnosis_api.core.identifiers import is_cuid, is_uuid


def _reject(name: str, message: str, error_type: str) -> RequestValidationError:
    return RequestValidationError(
        [{"loc": ("path", name), "msg": message, "type": error_type}],
    )


def valid_client_id(
    client_id: Annotated[str, Path(alias="clientId")],
) -> ClientId:
    if not is_uuid(client_id):
        raise _reject("clientId", "Invalid client ID format", "uuid")
    return ClientId(client_id.lower())


def valid_diagnosis_id(
    diagnosis_id: Annotated[str, Path(alias="id")],
) -> DiagnosisId:
    if not is_cuid(diagnosis_id):
        raise _reject("id", "Invalid diagnosis ID format", "cuid")
    return DiagnosisId(diagnosis_id)
