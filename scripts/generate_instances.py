#!/usr/bin/env python3
import argparse
import random
from pathlib import Path
from typing import Dict, List, Optional

from lpbridge.expr import lp_sum
from lpbridge.lp_format import to_lp_string, write_lp
from lpbridge.problem import Problem
from lpbridge.schemas import Variable

ROW_KINDS = ("<=", ">=", "==")


def generate_random_problem(
    num_vars: int, num_constraints: int, seed: Optional[int] = None
) -> Problem:
    """
    Build a bounded, feasible maximisation problem.

    Every variable lies in ``[0, ub]`` and a hidden point inside those bounds
    satisfies all rows, so HiGHS always reports ``optimal``. Rows cycle
    through ``<=``, ``>=`` and ``==`` and carry a constant offset on the
    left-hand side, which exporters and backends must move to the right.
    """

    rng = random.Random(seed)
    variables = [Variable(name=f"x{i}", lb=0.0, ub=rng.uniform(5.0, 20.0)) for i in range(num_vars)]
    point: Dict[str, float] = {v.name: rng.uniform(0.0, v.ub) for v in variables}

    problem = Problem(f"random lp {seed}", "max")
    problem += lp_sum(rng.uniform(1.0, 4.0) * v for v in variables)

    for j in range(num_constraints):
        coefs = [rng.uniform(0.5, 5.0) for _ in variables]
        offset = rng.uniform(-10.0, 10.0)
        activity = sum(c * point[v.name] for c, v in zip(coefs, variables)) + offset
        cmp = ROW_KINDS[j % len(ROW_KINDS)]
        if cmp == "<=":
            rhs = activity + rng.uniform(1.0, 10.0)
        elif cmp == ">=":
            rhs = activity - rng.uniform(1.0, 10.0)
        else:
            rhs = activity
        lhs = lp_sum(c * v for c, v in zip(coefs, variables)) + offset
        problem.add_constraint(lhs, cmp, rhs, name=f"c{j}")
    return problem


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate random feasible LP instances.")
    parser.add_argument("--vars", type=int, default=3, help="Number of variables")
    parser.add_argument("--constraints", type=int, default=3, help="Number of constraints")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--count", type=int, default=1, help="Number of instances")
    parser.add_argument("--out", type=Path, default=None, help="Directory for .lp files")
    args = parser.parse_args()

    problems: List[Problem] = [
        generate_random_problem(args.vars, args.constraints, (args.seed or 0) + idx)
        for idx in range(args.count)
    ]

    if args.out:
        args.out.mkdir(parents=True, exist_ok=True)
        for problem in problems:
            print(write_lp(problem, args.out / f"{problem.unique_name}.lp"))
    else:
        for problem in problems:
            print(to_lp_string(problem))


if __name__ == "__main__":
    main()
