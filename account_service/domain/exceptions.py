from __future__ import annotations


class DomainError(Exception):
    """Base for every error that crosses a component boundary."""


class ValidationError(DomainError):
    """Malformed input, fixable by the client."""


class ConflictError(DomainError):
    """State already satisfies (or contradicts) the request."""


class AuthError(DomainError):
    """Credentials or tokens were rejected."""


class NotFoundError(DomainError):
    """No matching row."""


class InternalError(DomainError):
    """Hashing, signing, storage or provider failure."""


class PasswordMismatchError(ValidationError):
    pass


class InvalidAmountError(ValidationError):
    pass


class MalformedPaymentIdError(ValidationError):
    pass


class InvalidOrExpiredResetCodeError(ValidationError):
    pass


class EmailAlreadyExistsError(ConflictError):
    pass


class AlreadyVerifiedError(ConflictError):
    pass


class InvalidCredentialsError(AuthError):
    pass


class NotVerifiedError(AuthError):
    pass


class NotAuthenticatedError(AuthError):
    pass


class TokenExpiredError(AuthError):
    pass


class TokenMalformedError(AuthError):
    pass


class TokenBadSignatureError(AuthError):
    pass


class UserNotFoundError(NotFoundError):
    pass


class VerificationCodeNotFoundError(NotFoundError):
    pass


class PaymentNotFoundOrSettledError(NotFoundError):
    pass


class StorageError(InternalError):
    pass


class TokenSigningError(InternalError):
    pass


class PasswordHashingError(InternalError):
    pass


class CodeGenerationError(InternalError):
    pass


class PaymentProviderError(InternalError):
    pass


class EmailDeliveryError(InternalError):
    pass


class SessionDeliveryError(InternalError):
    pass
