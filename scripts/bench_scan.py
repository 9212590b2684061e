import json
import os
import platform
import sys
import time
from concurrent.futures import ProcessPoolExecutor

from faucet_miner.hashing import normalize_address
from faucet_miner.scan_auto import find_nonce_bounded_auto


def main():
    address = normalize_address("0x" + "00" * 19 + "01")
    reference = 10**17

    # Target 0 is never met, so every batch is a full-length scan.
    target_int = 0

    batches = 5
    batch_size = 20000  # 100k hashes per backend

    workers = max(1, min(4, os.cpu_count() or 1))
    out = {
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "workers": workers,
        "backends": {},
    }

    def run(executor, w):
        attempts = 0
        backend = "python"
        t0 = time.time()
        for i in range(batches):
            scan = find_nonce_bounded_auto(
                address,
                reference,
                target_int,
                start_nonce=i * batch_size,
                count=batch_size,
                executor=executor,
                workers=w,
            )
            attempts += scan.attempts
            backend = scan.backend
        dt = max(1e-9, time.time() - t0)
        out["backends"][backend] = {"hashes": attempts, "seconds": dt, "khps": (attempts / dt) / 1e3}

    run(None, 1)
    if workers > 1:
        with ProcessPoolExecutor(max_workers=workers) as ex:
            # warm up worker processes outside the timing
            find_nonce_bounded_auto(address, reference, target_int, 0, workers, executor=ex, workers=workers)
            run(ex, workers)

    print(json.dumps(out, indent=2))
    os.makedirs("results", exist_ok=True)
    with open("results/bench_scan.json", "w") as f:
        json.dump(out, f, indent=2)

    if any(b["khps"] <= 0 for b in out["backends"].values()):
        raise SystemExit("bench invalid: khps <= 0")


if __name__ == "__main__":
    main()
