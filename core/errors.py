class NotFoundError(ValueError):
    pass


class InsufficientFundsError(ValueError):
    pass


class InvalidPinError(ValueError):
    pass


class AuthError(ValueError):
    pass


class OtpError(ValueError):
    pass


class VpnBlockedError(ValueError):
    pass
