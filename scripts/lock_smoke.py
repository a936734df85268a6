"""Run a handful of lock scenarios against a live Redis."""

from __future__ import annotations

import argparse
import threading
from pathlib import Path

from redis_reentrant import LockSettings, create_lock, new_owner_token
from redis_reentrant.utils.logging import get_logger


logger = get_logger("LockSmoke")


def _check(label: str, actual: bool, expected: bool) -> bool:
    ok = actual is expected
    if ok:
        logger.info("%s: %s", label, actual)
    else:
        logger.error("%s: expected %s, got %s", label, expected, actual)
    return ok


def run(settings: LockSettings, key: str) -> bool:
    lock = create_lock(settings)
    results = []

    token = new_owner_token()
    results.append(_check("acquire", lock.lock(key, token, 30), True))
    results.append(_check("release", lock.unlock(key, token), True))

    token = new_owner_token()
    results.append(_check("nested acquire 1", lock.lock(key, token, 30), True))
    results.append(_check("nested acquire 2", lock.lock(key, token, 30), True))

    contender: dict = {}

    def other_thread() -> None:
        contender["locked"] = lock.lock(key, new_owner_token(), 30)
        contender["depth"] = lock.depth(key)

    worker = threading.Thread(target=other_thread)
    worker.start()
    worker.join()
    results.append(_check("contender blocked", contender["locked"], False))
    results.append(_check("contender depth is zero", contender["depth"] == 0, True))

    results.append(_check("nested release 2", lock.unlock(key, token), True))
    results.append(_check("nested release 1", lock.unlock(key, token), True))
    results.append(_check("unbalanced release", lock.unlock(key, token), False))
    return all(results)


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke-test the reentrant Redis lock.")
    parser.add_argument("--config", type=Path, default=None, help="Path to lock settings YAML (defaults to environment)")
    parser.add_argument("--key", default="smoke:job", help="Lock key to exercise")
    args = parser.parse_args()

    settings = LockSettings.from_file(args.config) if args.config else LockSettings.from_env()
    logger.info("Using %s (prefix=%r)", settings.redis_url, settings.key_prefix)
    if not run(settings, args.key):
        raise SystemExit(1)
    logger.info("All scenarios passed")


if __name__ == "__main__":
    main()
