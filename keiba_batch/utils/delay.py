"""待機時間ユーティリティ"""

import random
import time


def backoff_delay(attempt: int, base: float = 1.0, maximum: float = 10.0) -> float:
    """指数バックオフの待機秒数 min(base * 2^attempt, maximum)

    Args:
        attempt: 0始まりの試行回数
    """
    return min(base * (2 ** attempt), maximum)


def random_delay(min_seconds: float = 1.0, max_seconds: float = 3.0) -> float:
    """[min_seconds, max_seconds] のランダムな時間だけ待機する

    Returns:
        実際に待機した秒数
    """
    seconds = random.uniform(min_seconds, max_seconds)
    if seconds > 0:
        time.sleep(seconds)
    return seconds
