"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Required field is missing or malformed (label, amount, dates)"""

    pass


class NotFoundError(DomainException):
    """Referenced entity does not exist or belongs to another user"""

    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class DuplicateMonthError(DomainException):
    """Next-month creation when the target month already has a budget"""

    def __init__(self, year: int, month: int):
        super().__init__(f"Budget for {year}-{month:02d} already exists")
        self.year = year
        self.month = month


class CycleComputationError(DomainException):
    """Billing cycle prediction exhausted its iteration cap"""

    pass


class LimitExceededError(DomainException):
    """Cash-out withdrawal exceeds the card's available limit"""

    def __init__(self, card_id: str, requested, available):
        super().__init__(
            f"Withdrawal of {requested} exceeds available limit of {available} for card {card_id}"
        )
        self.card_id = card_id
        self.requested = requested
        self.available = available
