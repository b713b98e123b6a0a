from typing import Any, Dict, Optional

# Every failure the services can report. The HTTP layer turns these into
# {"success": false, "message": ...} responses with `status_code`.


class SweetShopError(Exception):
    status_code: int = 500
    message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message}


# ---------------------------
# Purchase / inventory
# ---------------------------
class PurchaseError(SweetShopError):
    pass


class InvalidAmount(PurchaseError):
    status_code = 400
    message = "Quantity must be a positive integer"

    def __init__(self, amount: Any = None):
        self.amount = amount
        super().__init__()


class NotFound(PurchaseError):
    status_code = 404
    message = "Sweet not found"

    def __init__(self, item_id: Optional[str] = None):
        self.item_id = item_id
        super().__init__()


class InsufficientStock(PurchaseError):
    status_code = 400

    def __init__(self, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(f"Insufficient quantity. Only {available} available.")

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["available"] = self.available
        return body


class StoreUnavailable(PurchaseError):
    status_code = 503
    message = "Inventory store unavailable"


# ---------------------------
# Identity / access
# ---------------------------
class UserExists(SweetShopError):
    status_code = 400
    message = "User with this email already exists"


class UserNotFound(SweetShopError):
    status_code = 404
    message = "User not found"


class InvalidCredentials(SweetShopError):
    status_code = 401
    message = "Invalid credentials"


class NotAuthenticated(SweetShopError):
    status_code = 401
    message = "Not authorized to access this route. No token provided."


class Forbidden(SweetShopError):
    status_code = 403
    message = "Admin access required"
