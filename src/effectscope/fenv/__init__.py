"""Floating-point exception sampling: hardware flags, numpy reports, test doubles."""

from effectscope.fenv.environment import (
    FloatingPointEnvironment,
    FpeSource,
    current_environment,
)
from effectscope.fenv.hardware import (
    FenvRuntime,
    HardwareFenv,
    apply_fenv_runtime,
    decide_fenv_runtime,
    get_fenv_runtime,
    get_hardware_fenv,
)
from effectscope.fenv.numpy_status import NUMPY_FPE_FLAGS, NumpyFloatStatus
from effectscope.fenv.scripted import ScriptedFpeSource

__all__ = [
    "NUMPY_FPE_FLAGS",
    "FenvRuntime",
    "FloatingPointEnvironment",
    "FpeSource",
    "HardwareFenv",
    "NumpyFloatStatus",
    "ScriptedFpeSource",
    "apply_fenv_runtime",
    "current_environment",
    "decide_fenv_runtime",
    "get_fenv_runtime",
    "get_hardware_fenv",
]
