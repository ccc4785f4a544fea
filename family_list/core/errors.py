"""Error hierarchy for every failure a request can hit.

Each error carries a ``kind`` (stable, machine readable), a human readable
``message`` and the HTTP status it maps to. The API layer turns any
``FamilyListError`` into ``{"error": {"kind": ..., "message": ...}}``.
"""


class FamilyListError(Exception):
    kind = "Error"
    http_status = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {"error": {"kind": self.kind, "message": self.message}}


class Unauthenticated(FamilyListError):
    kind = "Unauthenticated"
    http_status = 401
    default_message = "Missing user identity"


class UnknownUser(Unauthenticated):
    kind = "UnknownUser"
    default_message = "Unknown user"


class ValidationError(FamilyListError):
    kind = "ValidationError"
    http_status = 400
    default_message = "Invalid request data"


class AlreadyInFamily(FamilyListError):
    kind = "AlreadyInFamily"
    http_status = 409
    default_message = "User already belongs to a family"


class NotInFamily(FamilyListError):
    kind = "NotInFamily"
    http_status = 409
    default_message = "User does not belong to a family"


class FamilyNotFound(FamilyListError):
    kind = "FamilyNotFound"
    http_status = 404
    default_message = "No family with that invite code"


class NameMismatch(FamilyListError):
    kind = "NameMismatch"
    http_status = 403
    default_message = "Family name does not match the invite code"


class NotFound(FamilyListError):
    kind = "NotFound"
    http_status = 404
    default_message = "Not found"


class Forbidden(FamilyListError):
    kind = "Forbidden"
    http_status = 403
    default_message = "Not allowed for this family"


class Conflict(FamilyListError):
    kind = "Conflict"
    http_status = 409
    default_message = "Already exists"
