#!/usr/bin/env python3
import argparse
import time

from lpbridge.expr import decompose_expression, lp_sum
from lpbridge.schemas import Variable
from lpbridge.solvers import get_solver
from scripts.generate_instances import generate_random_problem


def bench_decompose(sizes) -> None:
    print("terms,variables,time_ms")
    for size in sizes:
        expr = lp_sum(2 * Variable(name=f"v{i}") for i in range(size))
        start = time.perf_counter()
        decomposition = decompose_expression(expr)
        elapsed_ms = (time.perf_counter() - start) * 1000
        print(f"{size},{len(decomposition.variables)},{elapsed_ms:.2f}")


def bench_solve(backend: str) -> None:
    solver = get_solver(backend)
    print("name,status,time_ms")
    for seed in range(3):
        problem = generate_random_problem(5, 6, seed)
        start = time.perf_counter()
        solution = solver.solve(problem)
        elapsed_ms = (time.perf_counter() - start) * 1000
        print(f"random-{seed},{solution.status},{elapsed_ms:.2f}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Time decomposition and solves.")
    parser.add_argument("--backend", default="highs", help="Backend used for the solve timings")
    args = parser.parse_args()
    bench_decompose([10, 100, 1000, 5000])
    bench_solve(args.backend)


if __name__ == "__main__":
    main()
