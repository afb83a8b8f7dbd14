"""Tests for au_common.errors and au_common.response."""

from src.au_common.errors import (
    AppError,
    AuctionNotFoundError,
    BidAmountTooLowError,
    BidConflictError,
    ConflictError,
    ForbiddenError,
    InsufficientRoleError,
    ItemEndedError,
    NotAMemberError,
    NotFoundError,
    OwnItemBidError,
    UnauthorizedError,
    ValidationError,
)
from src.au_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.http_status == 500
        assert err.details == {"reason": "INTERNAL"}

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)


class TestTaxonomy:
    def test_http_statuses(self) -> None:
        assert UnauthorizedError().http_status == 401
        assert ForbiddenError().http_status == 403
        assert NotFoundError().http_status == 404
        assert ValidationError().http_status == 422
        assert ConflictError().http_status == 409

    def test_forbidden_subclasses(self) -> None:
        for err in (NotAMemberError("A1"), InsufficientRoleError("do it"), OwnItemBidError()):
            assert isinstance(err, ForbiddenError)
            assert err.http_status == 403

    def test_not_a_member_reason(self) -> None:
        err = NotAMemberError("A1")
        assert err.reason == "NOT_A_MEMBER"
        assert "A1" in err.message

    def test_auction_not_found(self) -> None:
        err = AuctionNotFoundError("A9")
        assert isinstance(err, NotFoundError)
        assert err.details["reason"] == "AUCTION_NOT_FOUND"

    def test_amount_too_low_carries_min_bid(self) -> None:
        err = BidAmountTooLowError(amount=95, min_bid=100)
        assert isinstance(err, ValidationError)
        assert err.min_bid == 100
        assert err.details == {"reason": "AMOUNT_TOO_LOW", "min_bid": 100}

    def test_conflicts(self) -> None:
        assert ItemEndedError("I1").reason == "ITEM_ENDED"
        assert BidConflictError("I1").http_status == 409


class TestApiResponse:
    def test_success_response(self) -> None:
        resp = success_response({"id": "A1"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "A1"}
        assert resp.request_id.startswith("req_")

    def test_error_response(self) -> None:
        resp = error_response(4001, "Minimum bid is 100", {"reason": "AMOUNT_TOO_LOW"})
        assert resp.code == 4001
        assert resp.data == {"reason": "AMOUNT_TOO_LOW"}

    def test_model_dump(self) -> None:
        dumped = ApiResponse(data=[1]).model_dump()
        assert set(dumped) == {"code", "message", "data", "timestamp", "request_id"}
