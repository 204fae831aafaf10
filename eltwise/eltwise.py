from typing import Any, Optional

import jax


class Config:
    _instance = None

    def __new__(cls, *args: Any, **kwargs: Any) -> "Config":
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls, *args, **kwargs)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, "_initialized"):
            self._initialized = True  # Prevents reinitialization
            self._index_dtype = "int32"
            self._block_size = 256
            self._use_jit = True
            self._device: Optional[jax.Device] = None

    def set_index_dtype(self, index_dtype: Any) -> None:
        """
        Integer width used to address elements inside launches
        Parameters
        ----------
        index_dtype: Any
            One of int32, uint32, int64, uint64 (name or dtype)
        """
        from eltwise.core.meta import normalize_index_dtype

        self._index_dtype = normalize_index_dtype(index_dtype)

    @property
    def index_dtype(self) -> str:
        return self._index_dtype

    def set_block_size(self, block_size: int) -> None:
        """
        Number of lanes per launch block, must be a power of two
        """
        from eltwise.core.meta import validate_block_size

        self._block_size = validate_block_size(block_size)

    @property
    def block_size(self) -> int:
        return self._block_size

    @property
    def use_jit(self) -> bool:
        return self._use_jit

    def set_use_jit(self, use_jit: bool) -> None:
        self._use_jit = bool(use_jit)

    @property
    def device(self) -> Optional[jax.Device]:
        """
        Device used by streams created without an explicit device,
        None selects the first JAX device
        """
        return self._device

    def set_device(self, device: Optional[jax.Device]) -> None:
        self._device = device


class Session:
    """
    Lightweight context manager to scope Config settings per run.

    Example:
        with Session(index_dtype="int64", block_size=1024):
            ...
    Restores previous Config values on exit so tests/runs stay isolated.
    """

    def __init__(
        self,
        *,
        index_dtype: Any = None,
        block_size: int | None = None,
        use_jit: bool | None = None,
        device: Optional[jax.Device] = None,
    ) -> None:
        cfg = Config()
        self._prev = {
            "index_dtype": cfg.index_dtype,
            "block_size": cfg.block_size,
            "use_jit": cfg.use_jit,
            "device": cfg.device,
        }
        self._index_dtype = index_dtype
        self._block_size = block_size
        self._use_jit = use_jit
        self._device = device
        self._cfg = cfg

    def __enter__(self) -> "Config":
        if self._index_dtype is not None:
            self._cfg.set_index_dtype(self._index_dtype)
        if self._block_size is not None:
            self._cfg.set_block_size(self._block_size)
        if self._use_jit is not None:
            self._cfg.set_use_jit(self._use_jit)
        if self._device is not None:
            self._cfg.set_device(self._device)
        return self._cfg

    def __exit__(self, exc_type, exc, tb) -> None:
        self._cfg._index_dtype = self._prev["index_dtype"]  # type: ignore[attr-defined]
        self._cfg._block_size = self._prev["block_size"]  # type: ignore[attr-defined]
        self._cfg.set_use_jit(self._prev["use_jit"])
        self._cfg.set_device(self._prev["device"])
