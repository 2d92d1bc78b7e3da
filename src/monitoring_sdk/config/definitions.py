"""Metric definitions loaded from YAML configuration.

A definitions file lists metrics with their producer referenced by import
path::

    metrics:
      - name: queue_depth
        description: Items waiting in the queue
        kind: gauge
        operation: set
        interval: 5
        producer: myapp.queues:depth

Kind/operation compatibility is checked while the file is parsed, so a bad
file fails at load time instead of on the first tick.
"""

from __future__ import annotations

import importlib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from ..exceptions import InvalidMetricDefinitionError
from ..models import MetricDescriptor, MetricKind, Operation, Producer, ensure_supported


class MetricDefinition(BaseModel):
    """Configuration-file form of a :class:`MetricDescriptor`."""

    name: str
    description: str = ""
    kind: MetricKind
    operation: Operation
    interval: float = Field(gt=0, description="Seconds between updates")
    producer: str | None = Field(default=None, description="Import path 'module:attribute'")

    @model_validator(mode="after")
    def _check_operation(self) -> MetricDefinition:
        ensure_supported(self.kind, self.operation, metric=self.name)
        return self

    def to_descriptor(self) -> MetricDescriptor:
        """Resolve the producer and build the runtime descriptor."""
        producer = resolve_producer(self.producer, metric=self.name) if self.producer else None
        return MetricDescriptor(
            name=self.name,
            description=self.description,
            kind=self.kind,
            operation=self.operation,
            interval=self.interval,
            producer=producer,
        )


class MetricDefinitionFile(BaseModel):
    metrics: list[MetricDefinition] = Field(default_factory=list)


def resolve_producer(path: str, *, metric: str | None = None) -> Producer:
    """Import the callable referenced by ``module:attribute``.

    Raises:
        InvalidMetricDefinitionError: If the path is malformed, cannot be
            imported, or does not point to a callable.
    """
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise InvalidMetricDefinitionError(
            f"Producer '{path}' must be written as 'module:attribute'", metric=metric
        )
    try:
        target: Any = importlib.import_module(module_name)
        for part in attribute.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as exc:
        raise InvalidMetricDefinitionError(f"Cannot resolve producer '{path}': {exc}", metric=metric) from exc
    if not callable(target):
        raise InvalidMetricDefinitionError(f"Producer '{path}' is not callable", metric=metric)
    return target


def parse_definitions(data: Mapping[str, Any] | None) -> list[MetricDescriptor]:
    """Validate a definitions mapping and build descriptors from it.

    Raises:
        IncompatibleOperationError: If a definition pairs a kind with an
            operation it does not support.
        InvalidMetricDefinitionError: For any other malformed definition.
    """
    try:
        document = MetricDefinitionFile.model_validate(data or {})
    except ValidationError as err:
        raise InvalidMetricDefinitionError(f"Invalid metric definitions: {err}") from err
    return [definition.to_descriptor() for definition in document.metrics]


def load_definitions(path: str | Path) -> list[MetricDescriptor]:
    """Load metric descriptors from a YAML file."""
    config_path = Path(path)
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise InvalidMetricDefinitionError(f"Cannot read metric definitions from {config_path}: {exc}") from exc
    if data is not None and not isinstance(data, Mapping):
        raise InvalidMetricDefinitionError(f"Metric definitions in {config_path} must be a mapping")
    return parse_definitions(data)


__all__ = [
    "MetricDefinition",
    "MetricDefinitionFile",
    "load_definitions",
    "parse_definitions",
    "resolve_producer",
]
