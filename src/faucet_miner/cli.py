from __future__ import annotations

import argparse
import logging
import sys
import threading
from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

from .config import DEFAULT_CONFIG, SearchConfig, cfg_get, load_config
from .difficulty import expected_iterations, expected_time_seconds, format_duration, target
from .errors import MinerError
from .hashing import claim_digest, digest_hex
from .job import ClaimJob, parse_uint
from .multi import CandidateResult, search_window
from .progress import ProgressSample
from .scan import SearchResult
from .searcher import CancelToken, SearchCancelled, search
from .submission import JsonLineSubmitter, submit_claim
from .verify import is_valid


def _preparse_config(argv: list[str] | None) -> Tuple[SearchConfig, Dict[str, Any], list[str]]:
    p0 = argparse.ArgumentParser(add_help=False)
    p0.add_argument("--config", default=None, help="Path to TOML config (optional).")
    ns, rest = p0.parse_known_args(argv)
    if ns.config:
        cfg, raw = load_config(ns.config)
        return cfg, raw, rest
    return DEFAULT_CONFIG, {}, rest


def _print_progress(sample: ProgressSample) -> None:
    ref = "" if sample.reference_value is None else f" ref={sample.reference_value}"
    print(
        f"[STATS] iterations={sample.iterations} nonce={sample.nonce}{ref} "
        f"h/s={sample.hash_rate:.0f} elapsed={sample.elapsed_ms / 1000:.1f}s "
        f"progress={sample.progress_percent:.1f}%",
        flush=True,
    )


def _job_from_args(args: argparse.Namespace) -> ClaimJob:
    if args.address is None or args.reference is None or args.difficulty is None:
        raise ValueError("--address, --reference and --difficulty are required")
    return ClaimJob.create(
        address=args.address,
        reference_value=parse_uint(args.reference, "reference"),
        difficulty=int(args.difficulty),
    )


def _cancel_after(timeout: Optional[float]) -> Tuple[CancelToken, Optional[threading.Timer]]:
    token = CancelToken()
    if timeout is None:
        return token, None
    t = threading.Timer(timeout, token.cancel)
    t.daemon = True
    t.start()
    return token, t


def _window_mode(args: argparse.Namespace) -> bool:
    return bool(args.multi) or args.window is not None


def _mine(args: argparse.Namespace, job: ClaimJob, cfg: SearchConfig) -> int:
    token, timer = _cancel_after(args.timeout)
    try:
        if _window_mode(args):
            out = search_window(
                job.address,
                job.reference_value,
                job.difficulty,
                window=cfg.window if args.window is None else args.window,
                on_progress=_print_progress,
                cancel_token=token,
                config=cfg,
            )
        else:
            out = search(job.address, job.reference_value, job.difficulty, _print_progress, token, config=cfg)
    except KeyboardInterrupt:
        print("[STOP] interrupted")
        return 1
    finally:
        if timer is not None:
            timer.cancel()

    if isinstance(out, SearchCancelled):
        print(f"[STOP] cancelled after {out.iterations} iterations")
        return 1

    ref = out.reference_value if isinstance(out, CandidateResult) else job.reference_value
    print(f"[FOUND] reference={ref} nonce={out.nonce} hash={digest_hex(out.digest)} iterations={out.iterations}")

    if args.emit_claim:
        claim_job = replace(job, reference_value=ref)
        submit_claim(
            JsonLineSubmitter(sys.stdout),
            claim_job,
            SearchResult(nonce=out.nonce, digest=out.digest, iterations=out.iterations),
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    cfg, raw, rest = _preparse_config(argv)

    # Defaults come from config; CLI flags override after parse.
    default_address = cfg_get(raw, "claim", "address", default=None)
    default_reference = cfg_get(raw, "claim", "reference", default=None)
    default_difficulty = cfg_get(raw, "claim", "difficulty", default=None)

    p = argparse.ArgumentParser(prog="faucet-miner")
    p.add_argument("--config", default=None, help="Path to TOML config (optional).")

    p.add_argument("--selftest", action="store_true", help="Print the digest of an all-zero claim and exit.")
    p.add_argument("--mine", action="store_true", help="Search for a valid nonce.")
    p.add_argument("--verify", default=None, metavar="NONCE", help="Check a nonce against the target and exit.")
    p.add_argument("--estimate", action="store_true", help="Print target and expected work for the difficulty.")

    p.add_argument("--address", default=default_address, help="Claimant address (0x + 40 hex).")
    p.add_argument("--reference", default=None if default_reference is None else str(default_reference),
                   help="Reference value: balance in wei or block number (decimal or 0x hex).")
    p.add_argument("--difficulty", type=int, default=default_difficulty, help="Difficulty level (0..63).")

    p.add_argument("--multi", action="store_true", help="Search a window of reference values ([window] size from config).")
    p.add_argument("--window", type=int, default=None, help="Search this many consecutive reference values.")
    p.add_argument("--workers", type=int, default=cfg.workers, help="Worker processes for the nonce scan.")
    p.add_argument("--batch-size", type=int, default=cfg.batch_size, help="Attempts between yields/progress.")
    p.add_argument("--timeout", type=float, default=None, help="Cancel the search after this many seconds.")
    p.add_argument("--emit-claim", action="store_true", help="Write the found claim as a JSON line to stdout.")
    p.add_argument("--log-level", default="WARNING", help="Python logging level.")

    args = p.parse_args(rest)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.selftest:
        print(digest_hex(claim_digest(b"\x00" * 20, 0, 0)))
        return 0

    try:
        cfg = replace(cfg, workers=args.workers, batch_size=args.batch_size)

        if args.estimate:
            if args.difficulty is None:
                raise ValueError("--difficulty is required")
            d = int(args.difficulty)
            secs = expected_time_seconds(d, cfg.assumed_hash_rate)
            print(f"target=0x{target(d):x}")
            print(f"expected_iterations={expected_iterations(d)}")
            print(f"expected_time={format_duration(secs)} (at {cfg.assumed_hash_rate:.0f} h/s)")
            return 0

        job = _job_from_args(args)

        if args.verify is not None:
            nonce = parse_uint(args.verify, "nonce")
            ok = is_valid(job.address, job.reference_value, nonce, job.difficulty)
            print(f"hash={digest_hex(claim_digest(job.address, job.reference_value, nonce))} valid={ok}")
            return 0 if ok else 1

        if _window_mode(args) and cfg.workers > 1:
            # the window search interleaves candidates in-process
            raise ValueError("--workers > 1 is not supported with --multi/--window")

        if args.mine or _window_mode(args):
            return _mine(args, job, cfg)

    except (MinerError, ValueError) as e:
        print(f"[ERR] {type(e).__name__}: {e}")
        return 2

    print("Nothing to do. Try --mine, --verify or --estimate.")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
