import redis

RATE_LIMIT_KEY_PREFIX = "framehouse:ratelimit:"


def limiter(
    redis_client: redis.Redis,
    key: str,
    limit: int,
    window: int,
) -> tuple[bool, bool]:
    """
    Fixed window rate limiter, see https://konghq.com/blog/how-to-design-a-scalable-rate-limiting-algorithm

    Return `(process, alert)`: `process` is False once `key` made more than `limit` requests in the current window of
    `window` seconds, `alert` is True only for the request reaching the limit so that it is logged once per window.
    `key` should be an ip address.
    """
    counter_key = RATE_LIMIT_KEY_PREFIX + key
    nb_requests = int(redis_client.incr(counter_key))
    if nb_requests == 1:
        redis_client.expire(counter_key, window)

    if nb_requests < limit:
        return True, False
    return False, nb_requests == limit
