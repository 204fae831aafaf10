import jax
import pytest

from eltwise.eltwise import Config, Session


def test_config_is_singleton():
    assert Config() is Config()


def test_session_sets_and_restores_flags():
    cfg = Config()
    before_index = cfg.index_dtype
    before_block = cfg.block_size
    before_use_jit = cfg.use_jit
    before_device = cfg.device

    device = jax.devices()[0]
    with Session(
        index_dtype="int64", block_size=64, use_jit=False, device=device
    ) as c:
        assert c.index_dtype == "int64"
        assert c.block_size == 64
        assert c.use_jit is False
        assert c.device is device

    assert cfg.index_dtype == before_index
    assert cfg.block_size == before_block
    assert cfg.use_jit == before_use_jit
    assert cfg.device is before_device


def test_session_can_override_subset_and_restore():
    cfg = Config()
    cfg.set_index_dtype("int32")
    cfg.set_block_size(256)
    cfg.set_use_jit(True)

    with Session(block_size=32) as c:
        assert c.block_size == 32
        # unspecified flags remain unchanged
        assert c.index_dtype == "int32"
        assert c.use_jit is True

    assert cfg.block_size == 256


def test_nested_sessions_restore_state():
    cfg = Config()
    cfg.set_index_dtype("int32")
    cfg.set_block_size(256)
    cfg.set_use_jit(True)

    with Session(block_size=128, index_dtype="uint32") as s1:
        assert s1.block_size == 128
        with Session(use_jit=False, block_size=8) as s2:
            assert s2.use_jit is False
            assert s2.block_size == 8
            assert s2.index_dtype == "uint32"
        # after inner session, outer session settings remain
        assert s1.block_size == 128
        assert s1.use_jit is True
        assert s1.index_dtype == "uint32"

    assert cfg.block_size == 256
    assert cfg.index_dtype == "int32"
    assert cfg.use_jit is True


def test_config_rejects_invalid_values():
    cfg = Config()
    with pytest.raises(ValueError):
        cfg.set_block_size(100)
    with pytest.raises(ValueError):
        cfg.set_block_size(0)
    with pytest.raises(ValueError):
        cfg.set_index_dtype("int16")
    with pytest.raises(ValueError):
        cfg.set_index_dtype("float32")
    assert cfg.block_size == 256
    assert cfg.index_dtype == "int32"
