"""
core/errors.py -- Outcome taxonomy shared by every entity operation.

Domain and store-facing code raises these; the HTTP boundary maps them to a
response through core.normalizer.normalize(). No framework imports allowed.

Messages are user-facing and localized (French), except UnexpectedFailure.detail,
which is for the server log only.
"""

from __future__ import annotations


class MarinaError(Exception):
    """Base error for all user-request-scoped failures."""

    default_message = "Une erreur est survenue."

    def __init__(self, *messages: str) -> None:
        self.messages: list[str] = [m for m in messages if m] or [self.default_message]
        super().__init__(self.messages[0])


class AuthenticationFailure(MarinaError):
    """Bad credentials. Never says whether the email or the password was wrong."""

    default_message = "Identifiants erronés, veuillez réessayer."


class AuthorizationFailure(MarinaError):
    """Missing, invalid or expired session token."""

    default_message = "Connectez vous pour accéder a cette page"


class InvalidTokenError(AuthorizationFailure):
    """Raised by TokenService.verify() for any signature, format or expiry problem."""

    default_message = "Session invalide ou expirée, veuillez vous reconnecter."


class ValidationFailure(MarinaError):
    """One or more fields failed validation. messages holds one entry per problem."""

    default_message = "Les données envoyées sont invalides."

    def __init__(self, messages: list[str]) -> None:
        super().__init__(*messages)


class NotFoundError(MarinaError):
    default_message = "Ressource non trouvée"


class DuplicateKeyError(MarinaError):
    """A unique field (catway number, user email) already holds this value."""

    default_message = "Cette valeur existe déjà"

    def __init__(self, field: str, message: str = "") -> None:
        super().__init__(message)
        self.field = field


class MalformedIdentifierError(MarinaError):
    default_message = "Entrez un identifiant valide"

    def __init__(self, raw: object = None) -> None:
        super().__init__()
        self.raw = raw


class UnexpectedFailure(MarinaError):
    """Server-side failure. detail goes to the log, never to the client."""

    default_message = "Erreur interne du serveur"

    def __init__(self, detail: str = "") -> None:
        super().__init__()
        self.detail = detail
