# flake8: noqa

from .eltwise import (  # noqa: F401
    eltwise_add,
    eltwise_divide,
    eltwise_divide_check_zero,
    eltwise_multiply,
    eltwise_sub,
    scalar_add,
    scalar_multiply,
)
