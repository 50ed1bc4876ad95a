"""Micro-benchmark for record decoding on a generated in-memory table."""

from __future__ import annotations

import io
import time

from dbfscan.reader import DbfReader

FIELDS = [("NAME", "C", 20, 0), ("BORN", "D", 8, 0), ("AMOUNT", "N", 12, 2), ("OK", "L", 1, 0)]


def _descriptor(name: str, code: str, length: int, decimals: int) -> bytes:
    raw_name = name.encode("ascii").ljust(11, b"\x00")
    return raw_name + code.encode("ascii") + b"\x00" * 4 + bytes([length, decimals]) + b"\x00" * 14


def build_table(records: int) -> bytes:
    table = b"".join(_descriptor(*spec) for spec in FIELDS) + b"\x0d"
    header_length = 32 + len(table)
    record_length = 1 + sum(spec[2] for spec in FIELDS)
    prefix = (
        bytes([0x03, 124, 1, 1])
        + records.to_bytes(4, "little")
        + header_length.to_bytes(2, "little")
        + record_length.to_bytes(2, "little")
        + b"\x00" * 20
    )
    body = bytearray()
    for i in range(records):
        flag = b"*" if i % 50 == 0 else b" "
        body += flag + f"CUST{i:05d}".ljust(20).encode("ascii")
        body += f"2023{(i % 12) + 1:02d}{(i % 28) + 1:02d}".encode("ascii")
        body += f"{i * 1.25:12.2f}".encode("ascii") + (b"T" if i % 2 else b"F")
    return prefix + table + bytes(body) + b"\x1a"


def benchmark_decode(records: int = 50_000, runs: int = 3) -> dict[str, float]:
    data = build_table(records)
    total_bytes = len(data)
    best = None
    rows = 0
    for _ in range(runs):
        start = time.perf_counter()
        with DbfReader(io.BytesIO(data)) as reader:
            rows = sum(1 for _ in reader)
        elapsed = time.perf_counter() - start
        best = elapsed if best is None or elapsed < best else best
    mbps = (total_bytes / 1_000_000) / best if best else 0.0
    return {
        "records": records,
        "rows": rows,
        "bytes": total_bytes,
        "best_seconds": best or 0.0,
        "mbps": mbps,
    }


if __name__ == "__main__":
    result = benchmark_decode()
    print(result)
