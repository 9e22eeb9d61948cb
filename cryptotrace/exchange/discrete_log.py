"""
Discrete Logarithm Search

Finds the smallest x >= 0 with base^x = target (mod modulus) and records
every step of the search. Two interchangeable strategies share one result
contract:

- Brute force: tries x = 0, 1, 2, ... with one multiplication per step.
  O(p) time, O(1) memory.
- Baby-step giant-step: builds a table of base^j for j < m = ceil(sqrt(p)),
  then walks target * base^(-m*i) looking for a table hit.
  O(sqrt(p)) time and memory.

The caller-supplied step budget is the only bound on running time. When it
runs out before the search space is covered the trace is marked truncated.
Conditions that make a solution unlikely (composite modulus, shared
factors) only produce warnings; the search still runs.
"""

from dataclasses import dataclass
from enum import Enum
from math import isqrt
from typing import Any, Dict, List, Optional, Tuple

from ..core_crypto.rsa_math import gcd, is_probable_prime, mod_exp, mod_inverse
from ..errors import InvalidInputError
from ..logging_setup import get_logger


log = get_logger(__name__)


# ============================================================================
# Types
# ============================================================================

class SolverMethod(Enum):
    """Search strategy selected by the caller."""
    BRUTE_FORCE = "brute_force"
    BSGS = "bsgs"


class StepMethod(Enum):
    """Phase a trace step belongs to."""
    BRUTE_FORCE = "brute_force"
    BABY_STEP = "baby_step"
    GIANT_STEP = "giant_step"


@dataclass(frozen=True)
class DiscreteLogStep:
    """
    One search step.

    ``exponent`` is the exponent tried (brute force), j (baby step), or
    i*m for a giant step that missed. On the step that finds the answer
    it is the solution itself.
    """
    step: int
    method: StepMethod
    description: str
    current_value: int
    exponent: int
    found: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "method": self.method.value,
            "description": self.description,
            "current_value": str(self.current_value),
            "exponent": str(self.exponent),
            "found": self.found,
        }


@dataclass(frozen=True)
class DiscreteLogTrace:
    """
    Result of a discrete log search.

    solution=None with truncated=False means the whole search space was
    covered without a match.
    """
    base: int
    target: int
    modulus: int
    solution: Optional[int]
    steps: Tuple[DiscreteLogStep, ...]
    truncated: bool
    warnings: Tuple[str, ...]
    method_used: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base": str(self.base),
            "target": str(self.target),
            "modulus": str(self.modulus),
            "solution": None if self.solution is None else str(self.solution),
            "steps": [s.to_dict() for s in self.steps],
            "truncated": self.truncated,
            "warnings": list(self.warnings),
            "method_used": self.method_used,
        }


# ============================================================================
# Solvers
# ============================================================================

class DiscreteLogSolver:
    """
    Base class for discrete log strategies.

    ``solve`` validates and normalizes the inputs, collects advisory
    warnings, then hands over to the strategy's ``_search``.
    """

    method = None
    name = ""

    def solve(self, base: int, target: int, modulus: int,
              max_steps: int) -> DiscreteLogTrace:
        """
        Search for x with base^x = target (mod modulus).

        Args:
            base: Generator g (non-negative)
            target: Value y (non-negative)
            modulus: Positive modulus p
            max_steps: Step budget (non-negative)

        Returns:
            DiscreteLogTrace with the smallest solution found, or None

        Raises:
            InvalidInputError: If modulus <= 0 or any other input is negative
        """
        if modulus <= 0:
            raise InvalidInputError(f"Modulus must be positive, got {modulus}")
        if base < 0 or target < 0:
            raise InvalidInputError("Base and target must be non-negative")
        if max_steps < 0:
            raise InvalidInputError(f"max_steps must be non-negative, got {max_steps}")

        reduced_base = base % modulus
        reduced_target = target % modulus
        warnings = self._advisories(base, target, reduced_base, reduced_target, modulus)

        trace = self._search(reduced_base, reduced_target, modulus, max_steps, warnings)

        if trace.solution is not None:
            log.debug("dlog.solved", method=self.method.value, base=trace.base,
                      target=trace.target, modulus=modulus, solution=trace.solution,
                      steps=len(trace.steps))
        else:
            log.info("dlog.no_solution", method=self.method.value, modulus=modulus,
                     truncated=trace.truncated, steps=len(trace.steps))
        return trace

    def _advisories(self, base: int, target: int, reduced_base: int,
                    reduced_target: int, modulus: int) -> List[str]:
        warnings = []
        if reduced_base != base:
            warnings.append("Base reduced modulo modulus")
        if reduced_target != target:
            warnings.append("Target reduced modulo modulus")
        if gcd(reduced_base, modulus) != 1:
            warnings.append(
                "gcd(base, modulus) != 1; discrete log may not exist or be non-unique")
        if gcd(reduced_target, modulus) != 1:
            warnings.append(
                "gcd(target, modulus) != 1; target shares a factor with the modulus")
        if not is_probable_prime(modulus):
            warnings.append(
                f"Modulus is not prime; {self.name} may not find a solution "
                "if target is outside the subgroup generated by base.")
        for message in warnings:
            log.warning("dlog.advisory", method=self.method.value, message=message)
        return warnings

    def _search(self, base: int, target: int, modulus: int, max_steps: int,
                warnings: List[str]) -> DiscreteLogTrace:
        raise NotImplementedError


class BruteForceSolver(DiscreteLogSolver):
    """Sequential scan x = 0, 1, 2, ... (first match is the smallest)."""

    method = SolverMethod.BRUTE_FORCE
    name = "Brute Force"

    def _search(self, base, target, modulus, max_steps, warnings):
        steps: List[DiscreteLogStep] = []
        current = 1 % modulus

        # g^x mod p repeats within p exponents, so x < p covers every value
        limit = min(max_steps, modulus)

        for x in range(limit):
            found = current == target
            steps.append(DiscreteLogStep(
                step=x,
                method=StepMethod.BRUTE_FORCE,
                description=f"Trying exponent {x}: {base}^{x} ≡ {current} (mod {modulus})",
                current_value=current,
                exponent=x,
                found=found,
            ))
            if found:
                return DiscreteLogTrace(base, target, modulus, x, tuple(steps),
                                        False, tuple(warnings), self.name)
            current = (current * base) % modulus

        truncated = limit < modulus
        if truncated:
            method_used = f"{self.name} (stopped at max_steps; increase to continue)"
        else:
            method_used = f"{self.name} (no solution found)"
        return DiscreteLogTrace(base, target, modulus, None, tuple(steps),
                                truncated, tuple(warnings), method_used)


class BabyStepGiantStepSolver(DiscreteLogSolver):
    """
    Meet-in-the-middle search with a table of m = ceil(sqrt(p)) baby steps.

    max_steps caps m, the size of the baby-step table, not the length of
    the trace: a search runs up to m baby steps and then up to m giant
    steps, so a trace holds at most 2 * max_steps steps.
    """

    method = SolverMethod.BSGS
    name = "Baby-step Giant-step"

    def _search(self, base, target, modulus, max_steps, warnings):
        steps: List[DiscreteLogStep] = []

        ideal_m = isqrt(modulus)
        if ideal_m * ideal_m < modulus:
            ideal_m += 1
        m = min(ideal_m, max_steps)
        budget_cut = m < ideal_m
        if budget_cut:
            warnings.append(
                f"Search truncated by max_steps. Recommended m = ceil(sqrt(p)) = "
                f"{ideal_m}, but max_steps = {max_steps}.")

        def result(solution, method_used):
            return DiscreteLogTrace(base, target, modulus, solution, tuple(steps),
                                    budget_cut and solution is None,
                                    tuple(warnings), method_used)

        # Baby steps: table of base^j -> j, keeping the smallest j
        table: Dict[int, int] = {}
        current = 1 % modulus
        for j in range(m):
            found = current == target
            steps.append(DiscreteLogStep(
                step=len(steps),
                method=StepMethod.BABY_STEP,
                description=f"Baby step {j}: {base}^{j} ≡ {current} (mod {modulus})",
                current_value=current,
                exponent=j,
                found=found,
            ))
            if found:
                return result(j, self.name)
            table.setdefault(current, j)
            current = (current * base) % modulus

        if m == 0:
            return result(None, f"{self.name} (no steps allowed)")

        factor = mod_inverse(mod_exp(base, m, modulus), modulus)
        if factor is None:
            return result(None, f"{self.name} (failed - no inverse)")

        # Giant steps: target * base^(-m*i)
        gamma = target
        for i in range(m):
            j = table.get(gamma)
            if j is not None:
                solution = i * m + j
                steps.append(DiscreteLogStep(
                    step=len(steps),
                    method=StepMethod.GIANT_STEP,
                    description=(f"Giant step {i}: {gamma} matches baby step {j}; "
                                 f"x = {i}*{m} + {j} = {solution}"),
                    current_value=gamma,
                    exponent=solution,
                    found=True,
                ))
                return result(solution, self.name)

            steps.append(DiscreteLogStep(
                step=len(steps),
                method=StepMethod.GIANT_STEP,
                description=f"Giant step {i}: checking if {gamma} is in baby steps",
                current_value=gamma,
                exponent=i * m,
            ))
            gamma = (gamma * factor) % modulus

        return result(None, f"{self.name} (no solution found)")


_SOLVERS = {
    SolverMethod.BRUTE_FORCE: BruteForceSolver,
    SolverMethod.BSGS: BabyStepGiantStepSolver,
}


def get_solver(method) -> DiscreteLogSolver:
    """
    Solver instance for a method.

    Args:
        method: SolverMethod or its value ("brute_force" / "bsgs")

    Raises:
        InvalidInputError: If the method is unknown
    """
    try:
        method = SolverMethod(method)
    except ValueError:
        raise InvalidInputError(
            f"Unknown discrete log method {method!r}; "
            f"expected one of {[m.value for m in SolverMethod]}")
    return _SOLVERS[method]()


def discrete_log_brute_force(base: int, target: int, modulus: int,
                             max_steps: int) -> DiscreteLogTrace:
    """Brute-force discrete log (see BruteForceSolver)."""
    return BruteForceSolver().solve(base, target, modulus, max_steps)


def discrete_log_bsgs(base: int, target: int, modulus: int,
                      max_steps: int) -> DiscreteLogTrace:
    """
    Baby-step giant-step discrete log (see BabyStepGiantStepSolver).

    max_steps bounds the baby-step table, so up to 2 * max_steps steps
    are recorded.
    """
    return BabyStepGiantStepSolver().solve(base, target, modulus, max_steps)
