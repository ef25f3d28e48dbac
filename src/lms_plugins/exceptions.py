"""Exception hierarchy raised by the host layer and the plugin services.

Every exception carries an ``errorcode`` so the web layer can report it in
the same shape the AJAX dispatcher uses: ``{"errorcode": ..., "message": ...}``.
Form validation problems are *not* exceptions; they are returned as a
field → message mapping.
"""

from __future__ import annotations


class LmsError(Exception):
    """Base class for all errors raised by lms_plugins."""

    errorcode = "generalexceptionmessage"

    def __init__(self, message: str, *, debuginfo: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.debuginfo = debuginfo

    def to_dict(self) -> dict:
        d = {"errorcode": self.errorcode, "message": self.message}
        if self.debuginfo:
            d["debuginfo"] = self.debuginfo
        return d


class CodingError(LmsError):
    """The caller used an API in a way that can never work."""

    errorcode = "codingerror"


class InvalidParameterError(LmsError):
    """A service argument failed validation."""

    errorcode = "invalidparameter"


class RecordNotFoundError(LmsError):
    """A record the caller referred to does not exist."""

    errorcode = "invalidrecord"

    def __init__(self, table: str, recordid: object) -> None:
        super().__init__(f"Can not find data record in database table {table}.",
                         debuginfo=f"{table}: id={recordid}")
        self.table = table
        self.recordid = recordid


class RequiredCapabilityError(LmsError):
    """The current user lacks a capability in the given context."""

    errorcode = "nopermissions"

    def __init__(self, capability: str, contextid: int) -> None:
        super().__init__(
            f"Sorry, but you do not currently have permissions to do that ({capability}).",
            debuginfo=f"contextid={contextid}",
        )
        self.capability = capability
        self.contextid = contextid


class UnknownServiceError(LmsError):
    """A web-service method name that is not registered."""

    errorcode = "servicenotavailable"
