import time
from .cache import r


class RateExceeded(Exception):
    pass


def check_rate_ip(ip: str, limit=20, window=60):
    k = f"rl:ip:{ip}:{int(time.time()//window)}"
    v = r().incr(k)
    r().expire(k, window)
    if v > limit:
        raise RateExceeded(ip)
