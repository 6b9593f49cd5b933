# pylint: disable=redefined-outer-name
# pylint: disable=unused-argument
# pylint: disable=unused-import

import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import tracing_factory
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from tracing_factory.factory import TracingFactory
from tracing_factory.tracing import TracingRegistry

CURRENT_DIR = Path(sys.argv[0] if __name__ == "__main__" else __file__).resolve().parent

# env vars read by the OpenTelemetry SDK when defaults are built
_OTEL_ENVS = (
    "OTEL_PYTHON_ID_GENERATOR",
    "OTEL_RESOURCE_ATTRIBUTES",
    "OTEL_SDK_DISABLED",
    "OTEL_SERVICE_NAME",
    "OTEL_TRACES_SAMPLER",
    "OTEL_TRACES_SAMPLER_ARG",
)


@pytest.fixture(scope="session")
def package_dir() -> Path:
    pdir = Path(tracing_factory.__file__).resolve().parent
    assert pdir.exists()
    return pdir


@pytest.fixture(scope="session")
def project_slug_dir() -> Path:
    folder = CURRENT_DIR.parent
    assert folder.exists()
    assert any(folder.glob("src/tracing_factory"))
    return folder


@pytest.fixture(autouse=True)
def clean_otel_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _OTEL_ENVS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def registry() -> TracingRegistry:
    return TracingRegistry()


@pytest.fixture
def memory_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def create_tracing_factory(
    registry: TracingRegistry,
) -> Iterator[Callable[[dict[str, Any]], TracingFactory]]:
    """Creates factories from declarative definitions (property name -> value or reference)

    Every factory created here is destroyed at teardown, i.e. it behaves
    like a bean container that is closed after each test
    """
    created: list[TracingFactory] = []

    def _create(definition: dict[str, Any]) -> TracingFactory:
        factory = TracingFactory.model_validate(definition)
        factory.registry = registry
        created.append(factory)
        return factory

    yield _create

    for factory in created:
        factory.destroy()
