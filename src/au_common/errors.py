"""Unified error codes and custom exceptions.

Error code ranges map onto the error taxonomy:
  1xxx: Unauthorized  (401)
  2xxx: Forbidden     (403)
  3xxx: NotFound      (404)
  4xxx: Validation    (422)
  5xxx: Conflict      (409)
  9xxx: System        (500)

Every error carries a machine-readable ``reason``. Errors that the client can
act on (e.g. amount too low) add extra fields to ``details``.
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        reason: str = "INTERNAL",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.reason = reason
        self.details: dict[str, Any] = {"reason": reason, **(details or {})}
        super().__init__(message)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(1001, message, 401, "UNAUTHORIZED")


class ForbiddenError(AppError):
    def __init__(self, message: str = "Forbidden", reason: str = "FORBIDDEN") -> None:
        super().__init__(2001, message, 403, reason)


class NotFoundError(AppError):
    def __init__(self, message: str = "Not found", reason: str = "NOT_FOUND") -> None:
        super().__init__(3001, message, 404, reason)


class ValidationError(AppError):
    def __init__(
        self,
        message: str = "Validation failed",
        reason: str = "VALIDATION_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(4001, message, 422, reason, details)


class ConflictError(AppError):
    def __init__(self, message: str = "Conflict", reason: str = "CONFLICT") -> None:
        super().__init__(5001, message, 409, reason)


# --- 1xxx: Unauthorized ---

class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Account is disabled", 401, "ACCOUNT_DISABLED")


# --- 2xxx: Forbidden ---

class NotAMemberError(ForbiddenError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(f"Not a member of auction {auction_id}", "NOT_A_MEMBER")


class InsufficientRoleError(ForbiddenError):
    def __init__(self, action: str) -> None:
        super().__init__(f"You don't have permission to {action}", "INSUFFICIENT_ROLE")


class OwnItemBidError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__("You cannot bid on your own item", "OWN_ITEM")


class MemberNotModifiableError(ForbiddenError):
    def __init__(self, message: str) -> None:
        super().__init__(message, "MEMBER_NOT_MODIFIABLE")


# --- 3xxx: NotFound ---

class AuctionNotFoundError(NotFoundError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(f"Auction not found: {auction_id}", "AUCTION_NOT_FOUND")


class ItemNotFoundError(NotFoundError):
    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item not found: {item_id}", "ITEM_NOT_FOUND")


class MemberNotFoundError(NotFoundError):
    def __init__(self, member_id: str) -> None:
        super().__init__(f"Member not found: {member_id}", "MEMBER_NOT_FOUND")


class InviteNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("Invite not found or expired", "INVITE_NOT_FOUND")


class NotificationNotFoundError(NotFoundError):
    def __init__(self, notification_id: str) -> None:
        super().__init__(f"Notification not found: {notification_id}", "NOTIFICATION_NOT_FOUND")


class DiscussionNotFoundError(NotFoundError):
    def __init__(self, discussion_id: str) -> None:
        super().__init__(f"Discussion not found: {discussion_id}", "DISCUSSION_NOT_FOUND")


# --- 4xxx: Validation ---

class BidAmountTooLowError(ValidationError):
    def __init__(self, amount: int, min_bid: int) -> None:
        super().__init__(
            f"Minimum bid is {min_bid}, got {amount}",
            "AMOUNT_TOO_LOW",
            {"min_bid": min_bid},
        )
        self.min_bid = min_bid


class InvalidEndDateError(ValidationError):
    def __init__(self, message: str, reason: str = "INVALID_END_DATE") -> None:
        super().__init__(message, reason)


class UnknownCurrencyError(ValidationError):
    def __init__(self, code: str) -> None:
        super().__init__(f"Unknown currency: {code}", "UNKNOWN_CURRENCY")


# --- 5xxx: Conflict ---

class ItemEndedError(ConflictError):
    def __init__(self, item_id: str) -> None:
        super().__init__(f"Bidding has ended for item {item_id}", "ITEM_ENDED")


class AuctionEndedError(ConflictError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(f"Auction has already ended: {auction_id}", "AUCTION_ENDED")


class ItemHasBidsError(ConflictError):
    def __init__(self, detail: str) -> None:
        super().__init__(detail, "ITEM_HAS_BIDS")


class AlreadyMemberError(ConflictError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(f"Already a member of auction {auction_id}", "ALREADY_MEMBER")


class ItemNotPublishedError(ConflictError):
    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item is not published: {item_id}", "ITEM_NOT_PUBLISHED")


class DiscussionsDisabledError(ConflictError):
    def __init__(self, item_id: str) -> None:
        super().__init__(f"Discussions are disabled for item {item_id}", "DISCUSSIONS_DISABLED")


class BidConflictError(ConflictError):
    """The price pointer moved between the locked read and the write."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Concurrent bid detected on item {item_id}, retry", "BID_RACE")


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500, "INTERNAL")
