# Key Exchange Module
"""
Key exchange and the problem it rests on:
- Diffie-Hellman exchange trace
- Discrete logarithm search (brute force, baby-step giant-step)
"""

from .diffie_hellman import (
    DHStep,
    DHExchangeTrace,
    diffie_hellman_exchange,
    generate_dh_parameters,
)
from .discrete_log import (
    SolverMethod,
    StepMethod,
    DiscreteLogStep,
    DiscreteLogTrace,
    DiscreteLogSolver,
    BruteForceSolver,
    BabyStepGiantStepSolver,
    get_solver,
    discrete_log_brute_force,
    discrete_log_bsgs,
)

__all__ = [
    'DHStep',
    'DHExchangeTrace',
    'diffie_hellman_exchange',
    'generate_dh_parameters',
    'SolverMethod',
    'StepMethod',
    'DiscreteLogStep',
    'DiscreteLogTrace',
    'DiscreteLogSolver',
    'BruteForceSolver',
    'BabyStepGiantStepSolver',
    'get_solver',
    'discrete_log_brute_force',
    'discrete_log_bsgs',
]
