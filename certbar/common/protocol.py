"""Pydantic models: certificate descriptor, verification result."""

import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


# -------------------- ISSUANCE INPUT -------------------- #

class CertificateDescriptor(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str                          # raw serial number source
    country: str = ""
    organization: str = ""
    organizational_unit: str = ""
    common_name: str = ""
    alternative_names: List[str] = []
    usage: List[str] = []            # empty -> defaults for is_ca
    is_ca: bool = False
    private_key: Any                 # RSA/EC private key or KeyHandle
    signature_hash_algorithm: str = ""
    valid_from: datetime.datetime
    valid_to: datetime.datetime


# -------------------- CHAIN VERIFICATION -------------------- #

class VerificationStatus(str, Enum):
    OK = "OK"
    UNTRUSTED = "UNTRUSTED"          # chain, hostname or validity rejected
    PARSE_ERROR = "PARSE_ERROR"      # some input was not a certificate


class VerificationResult(BaseModel):
    status: VerificationStatus
    reason: str = ""
    subject: Optional[str] = None    # leaf CN when it could be parsed

    @property
    def ok(self) -> bool:
        return self.status == VerificationStatus.OK

    def __bool__(self) -> bool:
        return self.ok
