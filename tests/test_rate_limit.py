from types import SimpleNamespace

from queuewise.core.errors import AppError, NotFound, sanitize_error_message
from queuewise.core.rate_limit import MemoryRateLimiter, get_client_id


async def test_memory_limiter_fixed_window():
    limiter = MemoryRateLimiter(window_seconds=60)

    results = [await limiter.hit("booking:1.2.3.4", limit=2) for _ in range(3)]
    assert [r.allowed for r in results] == [True, True, False]
    assert results[0].remaining == 1
    assert results[2].retry_after >= 1

    # keys are independent
    assert (await limiter.hit("booking:5.6.7.8", limit=2)).allowed


def test_client_id_prefers_forwarded_headers():
    def request(headers, host="10.0.0.1"):
        return SimpleNamespace(headers=headers, client=SimpleNamespace(host=host))

    assert get_client_id(request({"x-forwarded-for": "203.0.113.7, 10.0.0.2"})) == "203.0.113.7"
    assert get_client_id(request({"x-real-ip": "198.51.100.4"})) == "198.51.100.4"
    assert get_client_id(request({})) == "10.0.0.1"


def test_error_messages_are_sanitised():
    assert sanitize_error_message(NotFound("ticket not found or expired")) == "ticket not found or expired"
    assert sanitize_error_message(RuntimeError("connection timed out to db-1")) == "Request timed out"
    assert sanitize_error_message(RuntimeError("boom at 0xdeadbeef")) == "An unexpected error occurred. Please try again."
    assert sanitize_error_message(RuntimeError("boom"), debug=True) == "boom"
    assert AppError().message == "Internal server error"
