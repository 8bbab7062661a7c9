import pytest

from scopebind import Container, registry


@pytest.fixture(autouse=True)
def _reset_injection_state():
    yield
    registry.clear()
    Container.root()._instances.clear()  # noqa: SLF001
