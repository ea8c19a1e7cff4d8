"""
Proportional target distribution.

Dependencies: None (pure domain logic)
System role: Splits a requested item total across groups by content size
"""

import math


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def balance_targets(targets: list[int], sizes: list[int], total: int, floor: int = 0) -> list[int]:
    """
    Adjust targets in place until they sum to ``total``.

    Missing units go to the largest group by size; surplus units come
    from the smallest group whose target is still above ``floor``.

    Args:
        targets: Current targets
        sizes: Group sizes aligned with targets
        total: Required sum
        floor: Minimum target a group may be reduced to

    Returns:
        list[int]: The adjusted targets
    """
    if not targets:
        return targets

    largest = max(range(len(sizes)), key=lambda i: sizes[i])
    current = sum(targets)
    while current < total:
        targets[largest] += 1
        current += 1

    while current > total:
        eligible = [i for i in range(len(targets)) if targets[i] > floor]
        if not eligible:
            break
        smallest = min(eligible, key=lambda i: sizes[i])
        targets[smallest] -= 1
        current -= 1

    return targets


def distribute_targets(sizes: list[int], total: int) -> list[int]:
    """
    Distribute ``total`` across groups proportionally to their sizes.

    Each group gets round(total * size / sum), rounding halves up, with a
    floor of 1, or 0 when there are more groups than items. The result is
    then balanced to sum to exactly ``total``.

    Args:
        sizes: Group sizes (chunk counts)
        total: Requested total

    Returns:
        list[int]: Targets aligned with ``sizes``

    Raises:
        ValueError: When total is negative
    """
    if total < 0:
        raise ValueError("total must not be negative")
    if not sizes:
        return []

    weights = list(sizes) if sum(sizes) > 0 else [1] * len(sizes)
    weight_sum = sum(weights)
    floor = 1 if total >= len(sizes) else 0
    targets = [max(floor, round_half_up(total * w / weight_sum)) for w in weights]
    return balance_targets(targets, weights, total, floor)
