"""Timing for the matrix kernels behind the lala verbs, over growing square sizes."""

from __future__ import annotations

import argparse
import json
import random
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable

from _bench_utils import host_metadata, mean, percentile, sample_ms, stddev

from lala import Environment, run
from lala.matrix import Matrix, det, dot, inverse, rank, rref


@dataclass(frozen=True)
class KernelSpec:
    name: str
    note: str
    build_args: Callable[[int, random.Random], tuple[object, ...]]
    fn: Callable[..., object]
    max_size: int


@dataclass(frozen=True)
class KernelRow:
    kernel: str
    size: int
    repeats: int
    mean_ms: float
    p50_ms: float
    p90_ms: float
    stddev_ms: float


def _random_matrix(n: int, rng: random.Random) -> Matrix:
    # Diagonally dominant, so inverse() never hits a singular input.
    rows = [[float(rng.randint(-9, 9)) for _ in range(n)] for _ in range(n)]
    for i in range(n):
        rows[i][i] = float(10 * n)
    return Matrix.from_rows(rows)


def _build_specs() -> list[KernelSpec]:
    def one(n: int, rng: random.Random) -> tuple[object, ...]:
        return (_random_matrix(n, rng),)

    def two(n: int, rng: random.Random) -> tuple[object, ...]:
        return (_random_matrix(n, rng), _random_matrix(n, rng))

    def script(n: int, rng: random.Random) -> tuple[object, ...]:
        m = _random_matrix(n, rng).tolist()
        literal = "; ".join(" ".join(f"{x:g}" for x in row) for row in m)
        source = f"fun step(a) {{ b = a @ >+a; c = b ++ a; c }}\nx = [{literal}]\ny = step(x)\n$y"
        return (source,)

    return [
        KernelSpec("dot", "jnp.matmul over the 2-D view", two, dot, 256),
        KernelSpec("rref", "Gauss-Jordan with correction pass", one, rref, 32),
        KernelSpec("rank", "rref plus nonzero-row count", one, rank, 32),
        KernelSpec("det", "Laplace expansion along row 1", one, det, 7),
        KernelSpec("inverse", "adjugate over determinant", one, inverse, 6),
        KernelSpec("script", "parse and interpret a short program", script, lambda src: run(src, Environment()), 6),
    ]


def _sizes(min_size: int, max_size: int) -> list[int]:
    out: list[int] = []
    n = max(1, min_size)
    while n <= max_size:
        out.append(n)
        n *= 2
    return out


def _print_rows(rows: list[KernelRow]) -> None:
    print(f"{'kernel':>8} {'size':>6} {'repeats':>8} {'mean(ms)':>11} {'p50(ms)':>11} {'p90(ms)':>11}")
    for row in rows:
        print(
            f"{row.kernel:>8} {row.size:>6} {row.repeats:>8} "
            f"{row.mean_ms:11.4f} {row.p50_ms:11.4f} {row.p90_ms:11.4f}"
        )
    print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark lala matrix kernels across square sizes.")
    parser.add_argument("--min-size", type=int, default=2, help="smallest matrix side")
    parser.add_argument("--max-size", type=int, default=64, help="largest matrix side (kernels cap their own size)")
    parser.add_argument("--repeats", type=int, default=5, help="calls per sample")
    parser.add_argument("--samples", type=int, default=5, help="samples per size")
    parser.add_argument("--warmup", type=int, default=1, help="untimed warmup calls per size")
    parser.add_argument("--seed", type=int, default=0, help="seed for the random matrix entries")
    parser.add_argument("--only", action="append", default=[], metavar="KERNEL", help="restrict to named kernel(s)")
    parser.add_argument("--json-out", default="", help="optional path for JSON output")
    args = parser.parse_args()

    rng = random.Random(args.seed)
    specs = [spec for spec in _build_specs() if not args.only or spec.name in args.only]

    print("lala matrix kernel benchmarks")
    print(json.dumps(host_metadata(), sort_keys=True))
    print()

    rows: list[KernelRow] = []
    for spec in specs:
        print(f"{spec.name}: {spec.note}")
        spec_rows: list[KernelRow] = []
        for size in _sizes(args.min_size, min(args.max_size, spec.max_size)):
            fn_args = spec.build_args(size, rng)
            samples = sample_ms(spec.fn, fn_args, repeats=args.repeats, warmup=args.warmup, samples=args.samples)
            spec_rows.append(
                KernelRow(
                    kernel=spec.name,
                    size=size,
                    repeats=args.repeats,
                    mean_ms=mean(samples),
                    p50_ms=percentile(samples, 0.5),
                    p90_ms=percentile(samples, 0.9),
                    stddev_ms=stddev(samples),
                )
            )
        _print_rows(spec_rows)
        rows.extend(spec_rows)

    if args.json_out:
        outpath = Path(args.json_out)
        outpath.parent.mkdir(parents=True, exist_ok=True)
        payload = {"host": host_metadata(), "rows": [asdict(row) for row in rows]}
        outpath.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Wrote JSON benchmark output: {outpath}")


if __name__ == "__main__":
    main()
