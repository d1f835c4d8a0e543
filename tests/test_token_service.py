import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from idempotence import (
    InMemoryTokenStore,
    RandomTokenBuilder,
    TokenNotFoundError,
    TokenService,
    UUIDTokenBuilder,
    default_token_service,
    token_service,
)
from idempotence.store.redis import RedisTokenStore
from idempotence.utils.logging import get_logger, setup_logging


class CountingBuilder:
    """Deterministic builder producing tok-1, tok-2, ..."""

    def __init__(self) -> None:
        self.calls = 0

    def build(self) -> str:
        self.calls += 1
        return f"tok-{self.calls}"


def test_issued_tokens_are_unique() -> None:
    service = TokenService()
    tokens = [service.issue_token() for _ in range(500)]
    assert len(set(tokens)) == 500


def test_issue_then_redeem_round_trip() -> None:
    service = TokenService()
    token = service.issue_token()
    assert service.redeem_token(token) is None


def test_token_redeems_only_once() -> None:
    service = TokenService()
    token = service.issue_token()
    service.redeem_token(token)
    with pytest.raises(TokenNotFoundError):
        service.redeem_token(token)


def test_unknown_token_rejected() -> None:
    service = TokenService()
    service.issue_token()
    with pytest.raises(TokenNotFoundError) as exc_info:
        service.redeem_token("never-issued")
    assert exc_info.value.token == "never-issued"


def test_redeem_propagates_store_error_unchanged() -> None:
    service = TokenService()
    try:
        service.redeem_token("missing")
    except TokenNotFoundError as e:
        assert type(e) is TokenNotFoundError
        assert e.__cause__ is None
    else:
        pytest.fail("expected TokenNotFoundError")


def test_is_pending_tracks_lifecycle() -> None:
    service = TokenService()
    token = service.issue_token()
    assert service.is_pending(token) is True
    service.redeem_token(token)
    assert service.is_pending(token) is False
    assert service.is_pending("never-issued") is False


def test_issue_stores_issuance_marker() -> None:
    store = InMemoryTokenStore()
    service = TokenService(store=store, builder=CountingBuilder())
    token = service.issue_token()
    value, found = store.get(token)
    assert token == "tok-1"
    assert found is True
    assert value is not None and value.endswith("Z")


def test_concurrent_redemption_has_single_winner() -> None:
    service = TokenService()
    token = service.issue_token()
    workers = 32
    barrier = threading.Barrier(workers)

    def redeem() -> bool:
        barrier.wait()
        try:
            service.redeem_token(token)
        except TokenNotFoundError:
            return False
        return True

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(lambda _: redeem(), range(workers)))

    assert results.count(True) == 1
    assert results.count(False) == workers - 1


@pytest.mark.parametrize("backend", ["memory", "redis"])
def test_contracts_hold_for_each_store(backend: str, fake_redis) -> None:
    store = InMemoryTokenStore() if backend == "memory" else RedisTokenStore(fake_redis)
    service = TokenService(store=store, builder=RandomTokenBuilder())

    first = service.issue_token()
    second = service.issue_token()
    assert first != second

    service.redeem_token(first)
    with pytest.raises(TokenNotFoundError):
        service.redeem_token(first)
    with pytest.raises(TokenNotFoundError):
        service.redeem_token("unknown")
    assert service.is_pending(second) is True
    service.redeem_token(second)


def test_generator_collision_overwrites_silently() -> None:
    class ConstantBuilder:
        def build(self) -> str:
            return "same"

    service = TokenService(builder=ConstantBuilder())
    assert service.issue_token() == "same"
    assert service.issue_token() == "same"
    service.redeem_token("same")
    with pytest.raises(TokenNotFoundError):
        service.redeem_token("same")


def test_default_service_is_shared(fresh_token_service) -> None:
    first = default_token_service()
    second = default_token_service()
    assert first is second
    assert isinstance(first.store, InMemoryTokenStore)
    assert isinstance(first.builder, UUIDTokenBuilder)

    token = first.issue_token()
    second.redeem_token(token)
    with pytest.raises(TokenNotFoundError):
        first.redeem_token(token)


def test_first_construction_wins(fresh_token_service) -> None:
    store = InMemoryTokenStore()
    builder = CountingBuilder()
    first = token_service(store=store, builder=builder)

    later = token_service(store=InMemoryTokenStore(), builder=RandomTokenBuilder())
    assert later is first
    assert later.store is store
    assert later.builder is builder
    assert default_token_service() is first


def test_default_first_then_custom_is_ignored(fresh_token_service) -> None:
    first = default_token_service()
    custom_store = InMemoryTokenStore()
    assert token_service(store=custom_store) is first
    assert first.store is not custom_store


def test_shared_service_created_once_under_contention(fresh_token_service) -> None:
    workers = 16
    barrier = threading.Barrier(workers)

    def get() -> TokenService:
        barrier.wait()
        return default_token_service()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        services = list(pool.map(lambda _: get(), range(workers)))

    assert all(s is services[0] for s in services)


def test_default_service_uses_env_builder(fresh_token_service, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IDEMPOTENCE_TOKEN_BUILDER", "uuid4")
    service = default_token_service()
    assert isinstance(service.builder, RandomTokenBuilder)


def test_default_service_leaves_host_logging_alone(
    fresh_token_service, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("IDEMPOTENCE_LOG_LEVEL", "DEBUG")
    setup_logging(level="ERROR", format="json")

    default_token_service()
    get_logger("host").info("host_info_should_be_filtered")

    assert "host_info_should_be_filtered" not in capsys.readouterr().err
