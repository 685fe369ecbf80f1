class RewardsError(Exception):
    def __init__(self, message: str, status_code: int = 400, code: str = "error"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class ValidationError(RewardsError):
    def __init__(self, message: str):
        super().__init__(message, status_code=400, code="validation_error")


class StoreUnavailable(RewardsError):
    def __init__(self, message: str):
        super().__init__(message, status_code=503, code="store_unavailable")
