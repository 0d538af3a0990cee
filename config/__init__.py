from .settings import *  # noqa: F401,F403
from .sim_config import SimConfig  # noqa: F401
