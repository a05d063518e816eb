"""
Engine error taxonomy.

Engines raise these; the API layer maps them onto HTTP status codes.
"""


class EngineError(Exception):
    """Base class for all match-engine failures"""
    status_code = 500


class NotFoundError(EngineError):
    """Fixture, team, tournament or ball does not exist"""
    status_code = 404


class InvalidState(EngineError):
    """Operation not allowed in the entity's current state"""
    status_code = 400


class ValidationFailure(EngineError):
    """Malformed or inconsistent payload"""
    status_code = 422
