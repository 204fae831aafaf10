from enum import Enum
from typing import Any, Callable, List, Optional

import jax

from eltwise._math import ops
from eltwise.core.buffer import DeviceBuffer
from eltwise.core.functions import capture
from eltwise.core.primitives import map_op, zip_op
from eltwise.core.stream import Stream


class EltwiseOperationType(Enum):
    """
    EltwiseOperationType

    Catalog of the element-wise arithmetic operations, each entry carries
    the number of input buffers, the required parameters and an id
    """

    ScalarAdd = (1, ["scalar"], 1)
    ScalarMultiply = (1, ["scalar"], 2)
    Add = (2, [], 3)
    Sub = (2, [], 4)
    Multiply = (2, [], 5)
    Divide = (2, [], 6)
    DivideCheckZero = (2, [], 7)

    def __init__(self, arity: int, required_params: List[str], op_id: int) -> None:
        self.arity = arity
        self.required_params = required_params

    @property
    def element_function(self) -> Callable[..., jax.Array]:
        """
        Returns the per-element function of this operation, scalar
        operations expect the scalar as the last argument
        """
        match self:
            case EltwiseOperationType.ScalarAdd:
                return ops.scalar_add
            case EltwiseOperationType.ScalarMultiply:
                return ops.scalar_multiply
            case EltwiseOperationType.Add:
                return ops.add
            case EltwiseOperationType.Sub:
                return ops.sub
            case EltwiseOperationType.Multiply:
                return ops.multiply
            case EltwiseOperationType.Divide:
                return ops.divide
            case EltwiseOperationType.DivideCheckZero:
                return ops.divide_check_zero
        raise ValueError("Operation Type not recognized")


def apply_operation(
    operation_type: EltwiseOperationType,
    out: DeviceBuffer,
    *inputs: DeviceBuffer,
    length: int,
    stream: Stream,
    scalar: Optional[Any] = None,
    index_dtype: Any = None,
) -> None:
    """
    Enqueue a cataloged operation through the matching primitive

    Parameters
    ----------
    operation_type: EltwiseOperationType
        Operation to apply
    out: DeviceBuffer
        Output buffer
    *inputs: DeviceBuffer
        One input buffer for scalar operations, two for the others
    length: int
        Number of elements
    stream: Stream
        Stream the work is enqueued on
    scalar: Optional[Any]
        Captured scalar, required by the scalar operations
    index_dtype: Any
        Index width of this launch, defaults to `Config().index_dtype`

    Raises
    ------
    KeyError
        If a required parameter is missing
    ValueError
        If the number of input buffers does not match the operation
    """
    params = {"scalar": scalar}
    for param in operation_type.required_params:
        if params[param] is None:
            raise KeyError(
                f"The '{param}' argument is required for {operation_type.name}"
            )
    if len(inputs) != operation_type.arity:
        raise ValueError(
            f"{operation_type.name} takes {operation_type.arity} input buffer(s), "
            f"got {len(inputs)}"
        )

    fn = operation_type.element_function
    if operation_type.required_params:
        fn = capture(fn, scalar)
    if operation_type.arity == 1:
        map_op(out, inputs[0], length, fn, stream, index_dtype=index_dtype)
    else:
        zip_op(
            out, inputs[0], inputs[1], length, fn, stream, index_dtype=index_dtype
        )
