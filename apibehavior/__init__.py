from .app_factory import create_app
from .binding import BindingSource, ParameterDescriptor, consumes_constraint, infer_binding_source
from .catalog import ProblemDetailsCatalog
from .compat_switches import CompatibilitySwitch, CompatibilityVersion, SwitchRegistry
from .context import ActionContext, ModelState
from .errors import InvalidConfigurationError, InvalidRequestState
from .options import ApiBehaviorOptions
from .problem_details import ProblemDetails, ValidationProblemDetails

__all__ = [
    "ActionContext",
    "ApiBehaviorOptions",
    "BindingSource",
    "CompatibilitySwitch",
    "CompatibilityVersion",
    "InvalidConfigurationError",
    "InvalidRequestState",
    "ModelState",
    "ParameterDescriptor",
    "ProblemDetails",
    "ProblemDetailsCatalog",
    "SwitchRegistry",
    "ValidationProblemDetails",
    "consumes_constraint",
    "create_app",
    "infer_binding_source",
]
