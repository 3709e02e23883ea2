class NotFoundException(Exception):
    def __init__(self, resource: str, identifier: str, status_code: int = 404):
        self.resource = resource
        self.identifier = identifier
        self.status_code = status_code

    def __str__(self):
        return f"{self.resource} '{self.identifier}' not found"


class DuplicateKey(Exception):
    pass


class InvalidPolicy(Exception):
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class IllegalTransition(Exception):
    pass


class RefundNotEligible(Exception):
    def __init__(self, message: str, eligibility=None):
        self.eligibility = eligibility
        super().__init__(message)
