# ============================================================================
# PARAMETER LINKER
# ============================================================================
# STATUS: Core - Job parameter to WorkflowParameter matching
# PURPOSE: Pair each Job Parameter with the Workflow slot it fills
# CREATED: 18 OCT 2026
# ============================================================================
"""
Parameter Linker

Matches a Job's Parameters against its Workflow's WorkflowParameters by
exact (case-sensitive) name. Each WorkflowParameter fills at most one
Parameter; the first schema with a given name wins.

Problems are returned as ParameterWithError entries, never raised:
- a Parameter with no free slot of that name: "No matching WorkflowParameter"
- a required slot left empty and with no default: "Required parameter not found"

Slots left empty that carry a default are returned in ``defaults`` so the
rendered Job can run with them.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from core.models import Job, Parameter, ParameterWithError, Workflow, WorkflowParameter

logger = logging.getLogger(__name__)

NO_MATCH = "No matching WorkflowParameter"
REQUIRED_NOT_FOUND = "Required parameter not found"


@dataclass
class LinkResult:
    """Linked (slot, parameter) pairs keyed by slot name, plus linking errors."""
    links: Dict[str, Tuple[WorkflowParameter, Parameter]] = field(default_factory=dict)
    errors: List[ParameterWithError] = field(default_factory=list)
    defaults: List[WorkflowParameter] = field(default_factory=list)

    def pairs(self) -> List[Tuple[WorkflowParameter, Parameter]]:
        return list(self.links.values())

    def parameter_for(self, name: str) -> Optional[Parameter]:
        pair = self.links.get(name)
        return pair[1] if pair else None


class ParameterLinker:
    """Stateless; one instance can be shared."""

    def link(self, job: Job, workflow: Workflow) -> LinkResult:
        """
        Link ``job.parameters`` to ``workflow.parameters``.

        Raises:
            ValueError: If job or workflow is None
        """
        if job is None:
            raise ValueError("Job cannot be None")
        if workflow is None:
            raise ValueError("Workflow cannot be None")

        result = LinkResult()

        slots: Dict[str, WorkflowParameter] = {}
        for slot in workflow.parameters:
            if slot.name is not None:
                slots.setdefault(slot.name, slot)
        consumed: Set[str] = set()

        for param in job.parameters:
            slot = None
            if param.name is not None and param.name not in consumed:
                slot = slots.get(param.name)

            if slot is None:
                result.errors.append(ParameterWithError.for_parameter(param, NO_MATCH))
                continue

            consumed.add(param.name)
            result.links[param.name] = (slot, param)

        if not workflow.parameters:
            return result

        for slot in workflow.parameters:
            if slot.name in consumed:
                continue
            if slot.has_default:
                if slots.get(slot.name) is slot:
                    result.defaults.append(slot)
            elif slot.is_required:
                result.errors.append(ParameterWithError.for_name(slot.name, REQUIRED_NOT_FOUND))

        logger.debug(
            f"Linked {len(result.links)} of {len(job.parameters)} parameters "
            f"for workflow {workflow.id} ({len(result.errors)} errors)"
        )
        return result


__all__ = ["ParameterLinker", "LinkResult", "NO_MATCH", "REQUIRED_NOT_FOUND"]
