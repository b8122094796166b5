# battery_scm/errors.py
"""
Domain errors raised by the services layer.

Routes do not catch these; main.py maps each class to an HTTP status.
"""


class ScmError(Exception):
    """Base class for all domain errors."""


class NotFoundError(ScmError):
    def __init__(self, entity: str, key: str):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key} not found")


class InvalidInputError(ScmError):
    pass


class InvalidTransitionError(ScmError):
    def __init__(self, kind: str, current: str, target: str):
        self.kind = kind
        self.current = current
        self.target = target
        super().__init__(f"{kind} cannot move from '{current}' to '{target}'")


class InsufficientStockError(ScmError):
    def __init__(self, product_code: str, requested: int, available: int):
        self.product_code = product_code
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough {product_code} on hand: requested {requested}, available {available}"
        )
