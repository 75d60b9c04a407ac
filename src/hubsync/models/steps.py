"""Deployment step catalog.

The catalog is a total order: the reconciler derives the active step from
``progress // (100 // len(STEP_CATALOG))`` and only ever completes prefixes of
this list. Reordering or resizing it changes what a given progress value
means, so bump STEP_CATALOG_VERSION together with any change to the backend's
status granularity.
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class StepDefinition:
    id: str
    label: str


STEP_CATALOG_VERSION: Final[int] = 1

STEP_CATALOG: Final[tuple[StepDefinition, ...]] = (
    StepDefinition(id="database", label="Database"),
    StepDefinition(id="keycloak", label="Keycloak realm"),
    StepDefinition(id="users", label="Initial users"),
    StepDefinition(id="services", label="Services"),
    StepDefinition(id="routing", label="Routing"),
)


def step_width(catalog: tuple[StepDefinition, ...] = STEP_CATALOG) -> int:
    """Percentage points of progress covered by one step (20 for five steps)."""
    if not catalog:
        raise ValueError("Step catalog must not be empty")
    return 100 // len(catalog)


def step_index_for(progress: int, catalog: tuple[StepDefinition, ...] = STEP_CATALOG) -> int:
    """Index of the step that is running at the given progress."""
    return min(progress // step_width(catalog), len(catalog) - 1)
