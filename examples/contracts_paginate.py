#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio

from tzpro.data import ClientConfig, OrderDirection, RateLimitError, TzproClient


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Page through TzPro contracts")
    p.add_argument("--creator", default=None, help="Only contracts originated by this address")
    p.add_argument("--limit", type=int, default=100)
    p.add_argument("--pages", type=int, default=3)
    p.add_argument("--cursor", type=int, default=0, help="Resume after this row id")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    async with TzproClient(ClientConfig.from_env()) as client:
        spec = (
            client.new_contract_query()
            .with_columns("row_id", "address", "creator", "first_seen_time")
            .with_order(OrderDirection.ASC)
            .with_limit(args.limit)
        )
        if args.creator:
            spec = spec.with_filter("creator", "eq", args.creator)

        paginator = client.paginate(spec, start_cursor=args.cursor, max_pages=args.pages)
        print("=" * 80)
        print(f"{'Row':>10} | {'Address':36} | {'First seen':25}")
        print("-" * 80)
        try:
            async for page in paginator:
                for c in page:
                    seen = c.first_seen_time.isoformat() if c.first_seen_time else "-"
                    print(f"{c.row_id:>10} | {c.address:36} | {seen:25}")
        except RateLimitError as e:
            print(f"Rate limited, retry after {e.deadline.isoformat()}")
        print("=" * 80)
        print(f"Resume with --cursor {paginator.cursor}")


if __name__ == "__main__":
    asyncio.run(main())
