"""Example: several workers race to redeem the same payment token."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from idempotence import TokenNotFoundError, TokenServiceConfig, default_token_service


def submit_payment(token: str, amount: float) -> str:
    service = default_token_service()
    try:
        service.redeem_token(token)
    except TokenNotFoundError:
        return "duplicate ignored"
    return f"charged {amount:.2f}"


def main() -> None:
    TokenServiceConfig.from_env().configure_logging()
    # Store and builder come from IDEMPOTENCE_* env; in-memory by default.
    service = default_token_service()
    token = service.issue_token()
    print("Issued token:", token)

    with ThreadPoolExecutor(max_workers=4) as pool:
        for outcome in pool.map(lambda _: submit_payment(token, 42.0), range(4)):
            print(outcome)


if __name__ == "__main__":
    main()
