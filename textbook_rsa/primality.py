import secrets

DEFAULT_WITNESSES = 10


def is_probably_prime(value: int, witnesses: int = DEFAULT_WITNESSES) -> bool:
    """Return ``True`` when ``value`` is probably prime using Miller–Rabin.

    Each round draws its base from ``secrets`` so the witnesses come from the
    operating system CSPRNG.  A composite survives all rounds with probability
    at most ``4 ** -witnesses``.
    """

    if value <= 1:
        return False
    if value <= 3:
        return True
    if value % 2 == 0:
        return False

    if witnesses <= 0:
        witnesses = DEFAULT_WITNESSES

    # Write value-1 as (2**s) * d with d odd.
    d = value - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1

    for _ in range(witnesses):
        a = secrets.randbelow(value - 3) + 2  # 2 <= a <= value-2
        x = pow(a, d, value)
        if x in (1, value - 1):
            continue
        for _ in range(s - 1):
            x = pow(x, 2, value)
            if x == 1:
                return False
            if x == value - 1:
                break
        if x != value - 1:
            return False
    return True


def false_positive_bound(witnesses: int = DEFAULT_WITNESSES) -> float:
    """Upper bound on the chance that a composite passes ``witnesses`` rounds."""

    if witnesses <= 0:
        witnesses = DEFAULT_WITNESSES
    return 4.0 ** -witnesses


__all__ = ["DEFAULT_WITNESSES", "is_probably_prime", "false_positive_bound"]
