MULTIPLIER = 2654435761
MODULUS = 2147483647


class SeededRng:
    """
    Deterministic stream seeded from a scent code.

    Each draw folds the caller's offset into the state, so the same code and
    the same sequence of offsets always reproduce the same values.
    """

    def __init__(self, identifier: str):
        self.state = sum(ord(c) for c in identifier)

    def next(self, offset: int = 0) -> float:
        self.state = ((self.state + offset) * MULTIPLIER) % MODULUS
        return self.state / MODULUS

    def __call__(self, offset: int = 0) -> float:
        return self.next(offset)
