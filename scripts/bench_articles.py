#!/usr/bin/env python3
"""Benchmark permission-filtered article listing: latency (p50, p95, p99) and QPS.

Usage:
    export API_URL=http://localhost:8000 KEYCLOAK_URL=http://localhost:8080
    python scripts/bench_articles.py [--num-queries 200] [--take 20]

The first request builds the user's ability; later requests hit the rule cache.
"""
from __future__ import annotations

import argparse
import os
import statistics
import sys
import time

import httpx


def get_token(
    keycloak_url: str,
    realm: str,
    client_id: str,
    client_secret: str,
    username: str,
    password: str,
) -> str:
    url = f"{keycloak_url.rstrip('/')}/realms/{realm}/protocol/openid-connect/token"
    r = httpx.post(
        url,
        data={
            "grant_type": "password",
            "client_id": client_id,
            "client_secret": client_secret,
            "username": username,
            "password": password,
        },
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        timeout=30.0,
    )
    r.raise_for_status()
    return r.json()["access_token"]


def percentile(sorted_values: list[float], fraction: float) -> float:
    index = max(int(len(sorted_values) * fraction) - 1, 0)
    return sorted_values[index]


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark filtered article listing")
    parser.add_argument("--num-queries", type=int, default=100, help="Number of list requests")
    parser.add_argument("--take", type=int, default=20, help="Page size")
    parser.add_argument("--output", type=str, default="/results/bench_articles.txt", help="Output file path")
    args = parser.parse_args()

    api_url = os.environ.get("API_URL", "http://localhost:8000").rstrip("/")
    keycloak_url = os.environ.get("KEYCLOAK_URL", "http://localhost:8080")
    realm = os.environ.get("KEYCLOAK_REALM", "rowguard")
    client_id = os.environ.get("KEYCLOAK_CLIENT_ID", "rowguard-api")
    client_secret = os.environ.get("KEYCLOAK_CLIENT_SECRET", "rowguard-api-secret")
    user = os.environ.get("BENCH_USER", "testuser")
    password = os.environ.get("BENCH_PASSWORD", "testpass")

    print("Getting token...")
    token = get_token(keycloak_url, realm, client_id, client_secret, user, password)
    headers = {"Authorization": f"Bearer {token}"}

    latencies: list[float] = []
    errors = 0
    total_rows = 0
    print(f"Running {args.num_queries} list requests...")
    start_total = time.perf_counter()
    with httpx.Client(timeout=30.0) as client:
        for i in range(args.num_queries):
            t0 = time.perf_counter()
            r = client.get(
                f"{api_url}/v1/articles",
                params={"skip": (i * args.take) % 1000, "take": args.take},
                headers=headers,
            )
            elapsed = time.perf_counter() - t0
            if r.status_code == 200:
                latencies.append(elapsed)
                total_rows = r.json().get("total", total_rows)
            else:
                errors += 1
    total_elapsed = time.perf_counter() - start_total

    n = len(latencies)
    if n == 0:
        print("No successful requests.")
        return 1

    ordered = sorted(latencies)
    qps = n / total_elapsed
    first = latencies[0] * 1000
    p50 = statistics.median(latencies) * 1000
    p95 = percentile(ordered, 0.95) * 1000 if n >= 20 else p50
    p99 = percentile(ordered, 0.99) * 1000 if n >= 100 else p95

    summary = (
        f"Article list benchmark (readable rows={total_rows}, queries={n}, errors={errors})\n"
        f"  QPS: {qps:.2f}\n"
        f"  First request (cold ability): {first:.1f} ms\n"
        f"  Latency: p50={p50:.1f} ms, p95={p95:.1f} ms, p99={p99:.1f} ms\n"
        f"  Total time: {total_elapsed:.2f} s\n"
    )
    print(summary)

    try:
        os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(summary)
        print(f"Wrote {args.output}")
    except OSError:
        pass

    return 0


if __name__ == "__main__":
    sys.exit(main())
