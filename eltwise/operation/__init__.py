# flake8: noqa

from .eltwise_operation import EltwiseOperationType, apply_operation  # noqa: F401
