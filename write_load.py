"""
write_load.py: simple async load script to allocate short codes

Usage:
  python write_load.py --base http://127.0.0.1:8000 --count 2000 --concurrency 100 --out codes_created.jsonl
  python write_load.py --alias-prefix race --count 500   # exercise alias conflicts (409s)
"""
import argparse
import asyncio
import json
import random
import string
import time
from collections import Counter
from datetime import datetime, timezone

import httpx

def _now_iso():
    return datetime.now(timezone.utc).isoformat()

def _rand_host():
    tlds = ["com", "net", "org", "io", "ai"]
    names = ["example", "sample", "demo", "test", "alpha", "beta", "gamma"]
    return f"{random.choice(names)}.{random.choice(tlds)}"

def _rand_path(n=6):
    alphabet = string.ascii_letters + string.digits
    return "".join(random.choice(alphabet) for _ in range(n))

async def _create_one(client: httpx.AsyncClient, base: str, out_file, idx: int, alias_prefix: str):
    url = f"https://{_rand_host()}/{_rand_path(8)}?q={idx}"
    payload = {"longUrl": url}
    if alias_prefix:
        # Few distinct aliases on purpose so concurrent requests race for them
        payload["customAlias"] = f"{alias_prefix}{idx % 10}"
    try:
        r = await client.post(f"{base}/shorten", json=payload, timeout=10)
    except httpx.HTTPError:
        return "transport_error"
    if r.status_code == 200:
        code = r.json().get("shortCode")
        if code and out_file:
            out_file.write(json.dumps({"code": code, "url": url}) + "\n")
    return r.status_code

async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8000")
    parser.add_argument("--count", type=int, default=2000)
    parser.add_argument("--concurrency", type=int, default=100)
    parser.add_argument("--alias-prefix", default="")
    parser.add_argument("--out", default="codes_created.jsonl")
    args = parser.parse_args()

    start_iso = _now_iso()
    t0 = time.perf_counter()
    outcomes = Counter()

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    # IMPORTANT: file uses normal "with"; client uses "async with" separately
    with open(args.out, "w", encoding="utf-8") as out_f:
        async with httpx.AsyncClient(limits=limit) as client:
            sem = asyncio.Semaphore(args.concurrency)

            async def _task(i):
                async with sem:
                    outcomes[await _create_one(client, args.base, out_f, i, args.alias_prefix)] += 1

            await asyncio.gather(*(_task(i) for i in range(args.count)))

    dt = time.perf_counter() - t0
    end_iso = _now_iso()
    success = outcomes.get(200, 0)
    print(f"START: {start_iso}")
    print(f"END:   {end_iso}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   writes={args.count}, ok={success}, conflicts={outcomes.get(409, 0)}, "
          f"errors={args.count - success - outcomes.get(409, 0)}")
    print(f"BY STATUS: {dict(outcomes)}")
    if dt > 0:
        print(f"TPS:   {success/dt:.1f} req/s")

if __name__ == "__main__":
    asyncio.run(main())
