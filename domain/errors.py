"""Error taxonomy for the visitor control service.

Every error carries a user-facing message (Spanish, shown as a notification by
the clients) and maps to one HTTP status in ``main.py``.
"""
from typing import Optional


class VisitorControlError(Exception):
    status_code = 500
    code = "internal_error"
    default_message = "Error inesperado"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(VisitorControlError):
    status_code = 404
    code = "not_found"
    default_message = "Registro no encontrado"


class ValidationError(VisitorControlError):
    status_code = 422
    code = "validation_error"
    default_message = "Datos inválidos"


class DuplicateError(VisitorControlError):
    status_code = 409
    code = "duplicate"
    default_message = "El registro ya existe"


class StoreUnavailableError(VisitorControlError):
    status_code = 503
    code = "store_unavailable"
    default_message = "Error al realizar la consulta"


class RegistrationDeniedError(VisitorControlError):
    status_code = 409
    code = "registration_denied"
    default_message = "Error al registrar ingreso"


class NotAuthenticatedError(VisitorControlError):
    status_code = 401
    code = "not_authenticated"
    default_message = "Sesión no válida"


class PermissionDeniedError(VisitorControlError):
    status_code = 403
    code = "permission_denied"
    default_message = "No tienes permisos para acceder a esta sección"
