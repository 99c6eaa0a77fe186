#!/usr/bin/env python3
"""
Memesense - Live API Health Check
Verifies a running Memesense service and connectivity to Solscan, CoinGecko and Birdeye.

Usage:
    python -m memesense.tools.health_check
    python -m memesense.tools.health_check --url http://localhost:8000
"""

import argparse
import sys

import requests

from ..config import MemesenseConfig


TEST_WALLET = "So11111111111111111111111111111111111111112"


def check_service(base_url: str) -> bool:
    print(f"\n[1/4] Checking Memesense service at {base_url}...")
    try:
        response = requests.get(f"{base_url}/check-api-keys", timeout=10)
        response.raise_for_status()
        payload = response.json()
    except requests.exceptions.RequestException as e:
        print(f"❌ Service unreachable: {e}")
        return False

    print(f"✅ Service up. Configured keys: {len(payload.get('configuredKeys', []))}")
    for missing in payload.get("missingKeys", []):
        print(f"⚠️  Missing: {missing}")
    return True


def check_solscan() -> bool:
    print("\n[2/4] Checking Solscan...")
    headers = {"Accept": "application/json"}
    key = MemesenseConfig.get_solscan_api_key()
    if key:
        headers["Authorization"] = f"Bearer {key}"

    for base in (MemesenseConfig.get_solscan_primary_url(), MemesenseConfig.get_solscan_secondary_url()):
        try:
            response = requests.get(f"{base}/account/{TEST_WALLET}", headers=headers, timeout=10)
        except requests.exceptions.RequestException as e:
            print(f"⚠️  {base} failed: {e}")
            continue
        if response.status_code == 200:
            print(f"✅ Solscan connected via {base}")
            return True
        print(f"⚠️  {base} returned status {response.status_code}")

    print("❌ All Solscan hosts failed. Wallet analysis will use synthesized data.")
    return False


def check_coingecko() -> bool:
    print("\n[3/4] Checking CoinGecko (No key required)...")
    try:
        response = requests.get(
            "https://api.coingecko.com/api/v3/simple/price",
            params={"ids": "solana", "vs_currencies": "usd"},
            timeout=10,
        )
        response.raise_for_status()
        price = response.json().get("solana", {}).get("usd")
    except (requests.exceptions.RequestException, ValueError) as e:
        print(f"❌ CoinGecko failed: {e}")
        return False

    print(f"✅ CoinGecko connected. SOL Price: ${price}")
    return True


def check_birdeye() -> bool:
    print("\n[4/4] Checking Birdeye API...")
    key = MemesenseConfig.get_birdeye_api_key()
    if not key:
        print("⚠️  BIRDEYE_API_KEY not found. Market movers and launches will be generated.")
        return True  # Not fatal

    try:
        response = requests.get(
            "https://public-api.birdeye.so/defi/token_trending",
            params={"sort_by": "rank", "sort_type": "asc", "offset": 0, "limit": 1},
            headers={"X-API-KEY": key, "x-chain": "solana"},
            timeout=10,
        )
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        print(f"❌ Birdeye failed: {e}")
        return False

    print("✅ Birdeye connected.")
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Memesense connectivity check")
    parser.add_argument(
        "--url",
        default=f"http://localhost:{MemesenseConfig.get_port()}",
        help="Base URL of a running Memesense service",
    )
    args = parser.parse_args(argv)

    print("=== Memesense Connectivity Check ===")
    results = [check_service(args.url.rstrip("/")), check_solscan(), check_coingecko(), check_birdeye()]

    if all(results):
        print("\n✅ All systems GO.")
        return 0
    print("\n❌ Some systems failed checks.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
