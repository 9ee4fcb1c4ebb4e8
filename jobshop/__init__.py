"""ShopSolver — Job Shop and Flexible Job Shop Scheduling via OR-Tools CP-SAT."""
from .models import *  # noqa: F401,F403
from .errors import JobShopError, ModelBuildError  # noqa: F401
from .backend import ConstraintBackend, CpSatBackend  # noqa: F401
from .horizon import compute_horizon, num_machines  # noqa: F401
from .builder import BuiltModel, ModelBuilder, build_model  # noqa: F401
from .reconstruct import reconstruct_schedule  # noqa: F401
from .engine import solve_jobshop, solve_with_first_alternatives  # noqa: F401
from .config import SolverSettings  # noqa: F401
from .validator import validate_schedule  # noqa: F401
