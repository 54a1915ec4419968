"""Error types raised by certbar."""


class CertbarError(Exception):
    """Base class for all certbar errors."""


class UnsupportedKeyError(CertbarError, TypeError):
    """Key is neither RSA nor elliptic-curve."""


class UnknownTokenError(CertbarError, ValueError):
    """Usage or hash token not recognized (strict mode only)."""


class SigningError(CertbarError):
    """The certificate could not be built or signed."""


class CertificateParseError(CertbarError, ValueError):
    """Bytes could not be parsed as an X.509 certificate."""
