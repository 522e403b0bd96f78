class ApiError(Exception):
    """A failed call to the storefront API.

    status_code is the HTTP status, or 0 when the request never got a
    response (connection refused, DNS failure, ...).
    """

    def __init__(self, status_code: int, detail=None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{status_code}: {detail}")

    @property
    def not_found(self) -> bool:
        return self.status_code == 404

    @property
    def message(self) -> str:
        if isinstance(self.detail, str) and self.detail:
            return self.detail
        return "Request failed. Please check your network connection."


class ValidationError(ValueError):
    """Input rejected before anything was sent to the API."""
