"""
Weight configuration scope only. Do not implement beyond this file's responsibilities.
Default weights and preset profiles - static data, never computed.
"""

from typing import Dict, List

from .errors import NotFoundError
from .weights import PriorityWeight, PriorityProfile

_DEFAULT_WEIGHTS = (
    PriorityWeight(
        id='client_priority',
        name='Client Priority Level',
        description='Higher priority clients get preferential treatment',
        weight=0.25,
        category='fulfillment',
        rank=1
    ),
    PriorityWeight(
        id='task_fulfillment',
        name='Task Fulfillment Rate',
        description='Maximize number of requested tasks completed',
        weight=0.20,
        category='fulfillment',
        rank=2
    ),
    PriorityWeight(
        id='worker_fairness',
        name='Worker Load Fairness',
        description='Distribute workload evenly among workers',
        weight=0.15,
        category='fairness',
        rank=3
    ),
    PriorityWeight(
        id='skill_matching',
        name='Skill Match Quality',
        description='Assign tasks to best-qualified workers',
        weight=0.15,
        category='quality',
        rank=4
    ),
    PriorityWeight(
        id='phase_efficiency',
        name='Phase Efficiency',
        description='Minimize idle time and maximize slot utilization',
        weight=0.10,
        category='efficiency',
        rank=5
    ),
    PriorityWeight(
        id='group_cohesion',
        name='Group Cohesion',
        description='Keep related tasks and workers together',
        weight=0.10,
        category='efficiency',
        rank=6
    ),
    PriorityWeight(
        id='deadline_adherence',
        name='Deadline Adherence',
        description='Prioritize tasks with tight deadlines',
        weight=0.05,
        category='quality',
        rank=7
    ),
)

PRESET_PROFILES: Dict[str, PriorityProfile] = {
    'maximize_fulfillment': PriorityProfile(
        id='maximize_fulfillment',
        name='Maximize Fulfillment',
        description='Focus on completing as many requested tasks as possible',
        weights={
            'client_priority': 0.35,
            'task_fulfillment': 0.30,
            'skill_matching': 0.15,
            'worker_fairness': 0.10,
            'phase_efficiency': 0.05,
            'group_cohesion': 0.03,
            'deadline_adherence': 0.02
        }
    ),
    'fair_distribution': PriorityProfile(
        id='fair_distribution',
        name='Fair Distribution',
        description='Ensure equitable workload distribution among workers',
        weights={
            'worker_fairness': 0.40,
            'skill_matching': 0.20,
            'task_fulfillment': 0.15,
            'client_priority': 0.10,
            'phase_efficiency': 0.08,
            'group_cohesion': 0.05,
            'deadline_adherence': 0.02
        }
    ),
}


def default_weights() -> List[PriorityWeight]:
    """Fresh copies of the default weights (sum to 1.0)."""
    return [PriorityWeight(**w.to_dict()) for w in _DEFAULT_WEIGHTS]


def get_profile(profile_id: str) -> PriorityProfile:
    """Look up a preset profile by id."""
    profile = PRESET_PROFILES.get(profile_id)
    if profile is None:
        raise NotFoundError("profile", profile_id)
    return profile


def list_profiles() -> List[PriorityProfile]:
    return list(PRESET_PROFILES.values())
