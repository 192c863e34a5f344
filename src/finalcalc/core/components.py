from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional, Sequence

from finalcalc.core.models import (
    COMMITTEE_SCHEME,
    MAX_COMPONENTS,
    MIDTERM_SCHEME,
    MIN_COMPONENTS,
    TOTAL_WEIGHT,
    ComponentSet,
    WeightedComponent,
)
from finalcalc.core.validation import (
    ReadOnlyWeightError,
    is_balanced,
    normalize_score,
    normalize_weight,
)

# Weight the previous derived slot hands to a newly added component.
ADD_SPLIT_WEIGHT = 10.0
ADD_SPLIT_FLOOR = 5.0

MIDTERM_DEFAULT_WEIGHTS = (40.0, 60.0)
COMMITTEE_DEFAULT_WEIGHTS = (30.0, 30.0, 40.0)


def default_label(scheme: str, index: int, count: int) -> str:
    if scheme == MIDTERM_SCHEME:
        return "Final" if index == count - 1 else f"Midterm {index + 1}"
    return f"Committee {index + 1}"


def _relabel(scheme: str, components: Sequence[WeightedComponent]) -> tuple[WeightedComponent, ...]:
    count = len(components)
    return tuple(replace(c, label=default_label(scheme, i, count)) for i, c in enumerate(components))


def _with_derived(components: Sequence[WeightedComponent]) -> tuple[WeightedComponent, ...]:
    others = sum(c.weight for c in components[:-1])
    last = replace(components[-1], weight=TOTAL_WEIGHT - others)
    return (*components[:-1], last)


def even_weights(count: int) -> tuple[float, ...]:
    each = float(math.floor(TOTAL_WEIGHT / count))
    return (each,) * (count - 1) + (TOTAL_WEIGHT - each * (count - 1),)


def build_component_set(
    weights: Sequence[float],
    scores: Optional[Sequence[Optional[float]]] = None,
    *,
    scheme: str = MIDTERM_SCHEME,
    labels: Optional[Sequence[str]] = None,
    customized: bool = True,
) -> ComponentSet:
    """Build a set from caller-supplied lists, keeping the weights as given."""
    if scores is None:
        scores = [None] * len(weights)
    if len(scores) != len(weights):
        raise ValueError("scores and weights must have the same length")
    if labels is not None and len(labels) != len(weights):
        raise ValueError("labels and weights must have the same length")

    components = tuple(
        WeightedComponent(
            weight=float(weight),
            score=normalize_score(score),
            label=labels[i] if labels is not None else default_label(scheme, i, len(weights)),
        )
        for i, (weight, score) in enumerate(zip(weights, scores))
    )
    return ComponentSet(components=components, scheme=scheme, customized=customized)


def midterm_preset() -> ComponentSet:
    return build_component_set(MIDTERM_DEFAULT_WEIGHTS, scheme=MIDTERM_SCHEME, customized=False)


def committee_preset() -> ComponentSet:
    return build_component_set(COMMITTEE_DEFAULT_WEIGHTS, scheme=COMMITTEE_SCHEME, customized=False)


def preset_for(scheme: str) -> ComponentSet:
    if scheme == MIDTERM_SCHEME:
        return midterm_preset()
    if scheme == COMMITTEE_SCHEME:
        return committee_preset()
    raise ValueError(f"Unsupported weighting scheme: {scheme}")


def set_count(component_set: ComponentSet, count: int) -> ComponentSet:
    count = max(MIN_COMPONENTS, min(MAX_COMPONENTS, int(count)))
    old = component_set.components
    if count == len(old):
        return component_set

    kept = min(count, len(old))
    components = list(old[:kept]) + [WeightedComponent(weight=0.0) for _ in range(count - kept)]

    if component_set.customized:
        components = list(_with_derived(components))
    else:
        components = [replace(c, weight=w) for c, w in zip(components, even_weights(count))]

    return replace(component_set, components=_relabel(component_set.scheme, components))


def set_weight(component_set: ComponentSet, index: int, value: float) -> ComponentSet:
    if not 0 <= index < len(component_set):
        raise IndexError(f"Component index out of range: {index}")
    if index == component_set.derived_index:
        raise ReadOnlyWeightError("The derived weight is recomputed and cannot be set directly")

    components = list(component_set.components)
    components[index] = replace(components[index], weight=normalize_weight(value))
    return replace(component_set, components=_with_derived(components), customized=True)


def set_score(component_set: ComponentSet, index: int, value: Optional[float]) -> ComponentSet:
    if not 0 <= index < len(component_set):
        raise IndexError(f"Component index out of range: {index}")

    components = list(component_set.components)
    components[index] = replace(components[index], score=normalize_score(value))
    return replace(component_set, components=tuple(components))


def add_component(component_set: ComponentSet) -> ComponentSet:
    if len(component_set) >= MAX_COMPONENTS:
        return component_set

    components = list(component_set.components)
    if is_balanced(component_set):
        previous = components[-1].weight
        handed_over = min(ADD_SPLIT_WEIGHT, max(0.0, previous - ADD_SPLIT_FLOOR))
        components[-1] = replace(components[-1], weight=previous - handed_over)
    components.append(WeightedComponent(weight=0.0))

    return replace(
        component_set,
        components=_relabel(component_set.scheme, _with_derived(components)),
    )


def remove_component(component_set: ComponentSet) -> ComponentSet:
    if len(component_set) <= MIN_COMPONENTS:
        return component_set

    components = component_set.components[:-1]
    return replace(
        component_set,
        components=_relabel(component_set.scheme, _with_derived(components)),
    )
